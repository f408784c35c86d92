"""BOT regulatory report endpoints: generate, fetch, and list archived reports"""

import time
import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from bot_provisioning.api.v1.schemas import (
    ArchivedReportResponse,
    CategoryBucketSchema,
    CriteriaResponse,
    PortfolioResponse,
    ReportHistoryItem,
    ReportHistoryResponse,
    ReportRequest,
    ReportResponse,
)
from bot_provisioning.api.dependencies import get_loan_book_client, get_request_id, resolve_evaluated_at
from bot_provisioning.infrastructure.database.session import get_db
from bot_provisioning.infrastructure.database.repositories import ReportRepository
from bot_provisioning.infrastructure.clients.loan_book import LoanBookClient
from bot_provisioning.domain.classification import generate_bot_report
from bot_provisioning.domain.exceptions import LoanBookAPIError, InvalidLoanDataError
from bot_provisioning.infrastructure.observability.metrics import record_portfolio, loan_book_fetch_failures_counter
from bot_provisioning.infrastructure.observability.logging import log_report
from bot_provisioning.config import settings

router = APIRouter()


@router.post("/reports", response_model=ReportResponse)
async def create_report(
    request_body: ReportRequest,
    request: Request,
    db: Session = Depends(get_db),
    loan_book_client: LoanBookClient = Depends(get_loan_book_client),
):
    """
    Generate a BOT classification report for a tenant's loan book.

    Flow:
    1. Fetch the tenant's active loans from the loan book API
    2. Classify the portfolio as of today (or as_of)
    3. Archive the report
    4. Return the report with its archive ID
    """
    start_time = time.time()
    request_id = get_request_id(request)
    evaluated_at = resolve_evaluated_at(request_body.as_of)

    try:
        loans = await loan_book_client.get_loans(request_body.tenant_id)

        report = generate_bot_report(
            loans,
            evaluated_at,
            institution_name=settings.institution_name,
            msp_code=settings.msp_code,
            tenant_id=request_body.tenant_id,
        )

        report_repo = ReportRepository(db)
        db_report = report_repo.create_report(request_body.tenant_id, report)
        db.commit()

        portfolio = report.portfolio
        duration_ms = (time.time() - start_time) * 1000
        record_portfolio(portfolio, tenant_id=request_body.tenant_id)
        log_report(
            request_id,
            request_body.tenant_id,
            portfolio.loan_count,
            portfolio.npl_ratio,
            portfolio.total_provision_required,
            portfolio.missing_maturity_count,
            duration_ms,
        )

        return ReportResponse(
            report_id=str(db_report.id),
            tenant_id=request_body.tenant_id,
            institution_name=report.institution_name,
            msp_code=report.msp_code,
            report_date=report.report_date,
            portfolio=PortfolioResponse.from_portfolio(portfolio),
            criteria=CriteriaResponse.from_criteria(report.criteria),
            compliance_status=report.compliance_status,
            last_updated=report.last_updated,
        )

    except LoanBookAPIError as e:
        loan_book_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Loan book API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Loan book service unavailable")

    except InvalidLoanDataError as e:
        loan_book_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Invalid loan data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reports/history", response_model=ReportHistoryResponse)
def get_report_history(
    tenant_id: str = Query(..., description="Tenant identifier"),
    db: Session = Depends(get_db),
):
    """Recent archived reports for a tenant, latest as-of date first"""
    report_repo = ReportRepository(db)
    reports = report_repo.get_reports_by_tenant(tenant_id, limit=settings.report_history_limit)

    history_items = [
        ReportHistoryItem(
            report_id=str(r.id),
            report_date=r.report_date,
            loan_count=r.loan_count,
            npl_ratio=r.npl_ratio,
            par30=r.par30,
            total_provision_required=r.total_provision_required,
            created_at=r.created_at.isoformat(),
        )
        for r in reports
    ]

    return ReportHistoryResponse(tenant_id=tenant_id, reports=history_items)


@router.get("/reports/{report_id}", response_model=ArchivedReportResponse)
def get_report(report_id: str, db: Session = Depends(get_db)):
    """Retrieve an archived report with its category breakdown"""
    try:
        report_uuid = uuid.UUID(report_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid report ID format")

    report_repo = ReportRepository(db)
    report = report_repo.get_report_by_id(report_uuid)

    if not report:
        raise HTTPException(status_code=404, detail="Report not found")

    portfolio = PortfolioResponse(
        breakdown={key: CategoryBucketSchema(**bucket) for key, bucket in report.breakdown.items()},
        total_outstanding=report.total_outstanding,
        total_provision_required=report.total_provision_required,
        npl_ratio=report.npl_ratio,
        par30=report.par30,
        par90=report.par90,
        provision_coverage_ratio=report.provision_coverage_ratio,
        loan_count=report.loan_count,
        missing_maturity_count=report.missing_maturity_count,
    )

    return ArchivedReportResponse(
        report_id=str(report.id),
        tenant_id=report.tenant_id,
        institution_name=report.institution_name,
        msp_code=report.msp_code,
        report_date=report.report_date,
        portfolio=portfolio,
        compliance_status=report.compliance_status,
        created_at=report.created_at.isoformat(),
    )
