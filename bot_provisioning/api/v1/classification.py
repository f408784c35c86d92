"""Loan and portfolio classification endpoints"""

from fastapi import APIRouter

from bot_provisioning.api.v1.schemas import (
    ClassificationRequest,
    ClassificationResponse,
    ComplianceRequest,
    ComplianceResponse,
    CriteriaResponse,
    PortfolioRequest,
    PortfolioResponse,
)
from bot_provisioning.api.dependencies import resolve_evaluated_at
from bot_provisioning.domain.classification import (
    calculate_next_review_date,
    classify_loan,
    classify_portfolio,
    get_classification_criteria,
    validate_bot_compliance,
)
from bot_provisioning.domain.models import ClassificationResult, LoanType
from bot_provisioning.infrastructure.observability.metrics import record_classification, record_portfolio

router = APIRouter()


@router.post("/classification", response_model=ClassificationResponse)
def classify(request_body: ClassificationRequest):
    """Classify a single loan and compute its BOT provision"""
    evaluated_at = resolve_evaluated_at(request_body.as_of)
    loan = request_body.loan.to_loan_record()

    result = classify_loan(loan, evaluated_at)
    record_classification(result)

    return ClassificationResponse.from_result(loan.id, result)


@router.post("/portfolio", response_model=PortfolioResponse)
def classify_loan_portfolio(request_body: PortfolioRequest):
    """Classify a list of loans and return portfolio statistics (NPL, PAR30/90, coverage)"""
    evaluated_at = resolve_evaluated_at(request_body.as_of)
    loans = [loan.to_loan_record() for loan in request_body.loans]

    portfolio = classify_portfolio(loans, evaluated_at)
    record_portfolio(portfolio)

    return PortfolioResponse.from_portfolio(portfolio)


@router.post("/compliance", response_model=ComplianceResponse)
def check_compliance(request_body: ComplianceRequest):
    """
    Check a stored classification against the BOT rules as of today (or as_of).

    Used to detect stale or manually overridden classifications.
    """
    evaluated_at = resolve_evaluated_at(request_body.as_of)
    loan = request_body.loan.to_loan_record()

    # Only category and rate are compared; the rest is filled in to form a full result
    submitted = ClassificationResult(
        category=request_body.category,
        days_past_due=0,
        provision_rate=request_body.provision_rate,
        provision_amount=loan.outstanding_amount * request_body.provision_rate,
        is_housing_microfinance=loan.loan_type == LoanType.HOUSING_MICROFINANCE,
        classification_date=evaluated_at,
        next_review_date=calculate_next_review_date(request_body.category, evaluated_at),
    )
    compliant = validate_bot_compliance(loan, submitted, evaluated_at)
    expected = classify_loan(loan, evaluated_at)

    return ComplianceResponse(
        compliant=compliant,
        expected=ClassificationResponse.from_result(loan.id, expected),
    )


@router.get("/criteria", response_model=CriteriaResponse)
def get_criteria():
    """BOT day-bucket tables and provision rates"""
    return CriteriaResponse.from_criteria(get_classification_criteria())
