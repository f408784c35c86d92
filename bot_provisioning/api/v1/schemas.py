"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Optional

from bot_provisioning.domain.models import (
    ClassificationCriteria,
    ClassificationResult,
    DayBucket,
    LoanCategory,
    LoanRecord,
    LoanType,
    PortfolioClassification,
)


class LoanSchema(BaseModel):
    """Loan record supplied by the caller"""

    id: str = Field(..., min_length=1, description="Loan identifier, unique within a request")
    outstanding_amount: float = Field(..., description="Outstanding balance, basis for provisioning")
    principal_amount: float = 0.0
    interest_rate: float = 0.0
    loan_type: LoanType = LoanType.GENERAL
    disbursement_date: Optional[date] = None
    maturity_date: Optional[date] = Field(None, description="Anchor for days past due; omit if unknown")
    client_id: Optional[str] = None
    product_id: Optional[str] = None
    status: Optional[str] = None

    def to_loan_record(self) -> LoanRecord:
        return LoanRecord(**self.model_dump())


class ClassificationRequest(BaseModel):
    """Request body for POST /v1/classification"""

    loan: LoanSchema
    as_of: Optional[date] = Field(None, description="Evaluation date, defaults to today")


class ClassificationResponse(BaseModel):
    """Classification of a single loan"""

    loan_id: str
    category: LoanCategory
    days_past_due: int
    provision_rate: float
    provision_amount: float
    is_housing_microfinance: bool
    classification_date: datetime
    next_review_date: datetime
    maturity_date_missing: bool

    @classmethod
    def from_result(cls, loan_id: str, result: ClassificationResult) -> "ClassificationResponse":
        return cls(
            loan_id=loan_id,
            category=result.category,
            days_past_due=result.days_past_due,
            provision_rate=result.provision_rate,
            provision_amount=result.provision_amount,
            is_housing_microfinance=result.is_housing_microfinance,
            classification_date=result.classification_date,
            next_review_date=result.next_review_date,
            maturity_date_missing=result.maturity_date_missing,
        )


class PortfolioRequest(BaseModel):
    """Request body for POST /v1/portfolio"""

    loans: List[LoanSchema]
    as_of: Optional[date] = None


class CategoryBucketSchema(BaseModel):
    """Totals for one category"""

    count: int
    amount: float
    provision: float


class PortfolioResponse(BaseModel):
    """Portfolio-level BOT statistics"""

    breakdown: Dict[str, CategoryBucketSchema]
    total_outstanding: float
    total_provision_required: float
    npl_ratio: float
    par30: float
    par90: float
    provision_coverage_ratio: float
    loan_count: int
    missing_maturity_count: int

    @classmethod
    def from_portfolio(cls, portfolio: PortfolioClassification) -> "PortfolioResponse":
        return cls(
            breakdown={
                key: CategoryBucketSchema(count=b.count, amount=b.amount, provision=b.provision)
                for key, b in portfolio.breakdown.items()
            },
            total_outstanding=portfolio.total_outstanding,
            total_provision_required=portfolio.total_provision_required,
            npl_ratio=portfolio.npl_ratio,
            par30=portfolio.par30,
            par90=portfolio.par90,
            provision_coverage_ratio=portfolio.provision_coverage_ratio,
            loan_count=portfolio.loan_count,
            missing_maturity_count=portfolio.missing_maturity_count,
        )


class ComplianceRequest(BaseModel):
    """Request body for POST /v1/compliance"""

    loan: LoanSchema
    category: LoanCategory
    provision_rate: float = Field(..., ge=0, le=1)
    as_of: Optional[date] = None


class ComplianceResponse(BaseModel):
    """Whether a stored classification still matches the BOT rules"""

    compliant: bool
    expected: ClassificationResponse


class DayBucketSchema(BaseModel):
    """Closed days-past-due interval; max_days null means unbounded"""

    category: LoanCategory
    min_days: int
    max_days: Optional[int]

    @classmethod
    def from_bucket(cls, bucket: DayBucket) -> "DayBucketSchema":
        return cls(category=bucket.category, min_days=bucket.min_days, max_days=bucket.max_days)


class CriteriaResponse(BaseModel):
    """Response for GET /v1/criteria"""

    general_loans: List[DayBucketSchema]
    housing_microfinance: List[DayBucketSchema]
    provision_rates: Dict[str, float]

    @classmethod
    def from_criteria(cls, criteria: ClassificationCriteria) -> "CriteriaResponse":
        return cls(
            general_loans=[DayBucketSchema.from_bucket(b) for b in criteria.general_loans],
            housing_microfinance=[DayBucketSchema.from_bucket(b) for b in criteria.housing_microfinance],
            provision_rates={category.value: rate for category, rate in criteria.provision_rates.items()},
        )


class ReportRequest(BaseModel):
    """Request body for POST /v1/reports"""

    tenant_id: str = Field(..., min_length=1, description="Tenant whose loan book is reported")
    as_of: Optional[date] = None


class ReportResponse(BaseModel):
    """Freshly generated BOT report"""

    report_id: str
    tenant_id: str
    institution_name: str
    msp_code: str
    report_date: datetime
    portfolio: PortfolioResponse
    criteria: CriteriaResponse
    compliance_status: str
    last_updated: datetime


class ArchivedReportResponse(BaseModel):
    """Response for GET /v1/reports/{report_id}"""

    report_id: str
    tenant_id: str
    institution_name: str
    msp_code: str
    report_date: datetime
    portfolio: PortfolioResponse
    compliance_status: str
    created_at: str


class ReportHistoryItem(BaseModel):
    """Single archived report in history"""

    report_id: str
    report_date: datetime
    loan_count: int
    npl_ratio: float
    par30: float
    total_provision_required: float
    created_at: str


class ReportHistoryResponse(BaseModel):
    """Response for GET /v1/reports/history"""

    tenant_id: str
    reports: List[ReportHistoryItem]
