"""Loan book HTTP client for fetching a tenant's active loans"""

import logging
import httpx
from typing import Any, Dict, List
from bot_provisioning.domain.models import LoanRecord, LoanType
from bot_provisioning.domain.exceptions import LoanBookAPIError, InvalidLoanDataError
from bot_provisioning.utils.date_utils import parse_iso_date
from bot_provisioning.config import settings

logger = logging.getLogger(__name__)


def parse_loan(raw: Dict[str, Any]) -> LoanRecord:
    """
    Build a LoanRecord from a loan book row.

    A missing or unparseable maturity date is kept as None so the loan is
    classified as not yet due and flagged for review.

    Raises:
        InvalidLoanDataError: On missing id/amount or an unknown loan type
    """
    try:
        loan = LoanRecord(
            id=str(raw["id"]),
            outstanding_amount=float(raw["outstanding_amount"]),
            principal_amount=float(raw.get("principal_amount") or 0),
            interest_rate=float(raw.get("interest_rate") or 0),
            loan_type=LoanType(raw.get("loan_type") or LoanType.GENERAL.value),
            disbursement_date=parse_iso_date(raw.get("disbursement_date")),
            maturity_date=parse_iso_date(raw.get("maturity_date")),
            client_id=raw.get("client_id"),
            product_id=raw.get("product_id"),
            status=raw.get("status"),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidLoanDataError(f"Invalid loan record from loan book: {e}") from e

    if loan.maturity_date is None:
        logger.warning("Loan has no usable maturity date", extra={"loan_id": loan.id})

    return loan


class LoanBookClient:
    """Client for the external loan book API"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.loan_book_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def get_loans(self, tenant_id: str) -> List[LoanRecord]:
        """
        Fetch the active loans of a tenant.

        Raises:
            LoanBookAPIError: On timeout, HTTP errors, or a malformed response body
            InvalidLoanDataError: On an individual malformed loan record
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/loans",
                    params={"tenant_id": tenant_id},
                )
                response.raise_for_status()
                data = response.json()
                rows = data.get("loans", [])
                if not isinstance(rows, list):
                    raise ValueError(f"'loans' must be a list, got {type(rows).__name__}")

            except httpx.TimeoutException as e:
                raise LoanBookAPIError(f"Loan book API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise LoanBookAPIError(f"Loan book API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise LoanBookAPIError(f"Loan book API unreachable: {e}") from e
            except (ValueError, AttributeError) as e:
                raise LoanBookAPIError(f"Invalid response from loan book: {e}") from e

        return [parse_loan(row) for row in rows]
