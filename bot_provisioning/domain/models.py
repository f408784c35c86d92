"""Domain models - pure Python dataclasses representing loans and their classification"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class LoanType(str, Enum):
    """Selects which BOT day-bucket table applies"""

    GENERAL = "general"
    HOUSING_MICROFINANCE = "housing_microfinance"


class LoanCategory(str, Enum):
    """BOT risk category, value is the regulatory display label"""

    CURRENT = "Current"
    ESPECIALLY_MENTIONED = "Especially Mentioned"
    SUBSTANDARD = "Substandard"
    DOUBTFUL = "Doubtful"
    LOSS = "Loss"


@dataclass(frozen=True)
class DayBucket:
    """Closed interval of days past due; max_days=None means unbounded"""

    category: LoanCategory
    min_days: int
    max_days: Optional[int]

    def contains(self, days_past_due: int) -> bool:
        if days_past_due < self.min_days:
            return False
        return self.max_days is None or days_past_due <= self.max_days


@dataclass(frozen=True)
class LoanRecord:
    """Loan as loaded from the loan book"""

    id: str
    outstanding_amount: float
    principal_amount: float
    interest_rate: float
    loan_type: LoanType
    disbursement_date: Optional[date] = None
    maturity_date: Optional[date] = None
    client_id: Optional[str] = None
    product_id: Optional[str] = None
    status: Optional[str] = None


@dataclass
class ClassificationResult:
    """Output of classifying a single loan"""

    category: LoanCategory
    days_past_due: int
    provision_rate: float
    provision_amount: float
    is_housing_microfinance: bool
    classification_date: datetime
    next_review_date: datetime
    maturity_date_missing: bool = False


@dataclass
class CategoryBucket:
    """Running totals for one category in a portfolio"""

    count: int = 0
    amount: float = 0.0
    provision: float = 0.0


@dataclass
class PortfolioClassification:
    """Aggregate classification over a list of loans"""

    breakdown: Dict[str, CategoryBucket]
    total_outstanding: float
    total_provision_required: float
    npl_ratio: float
    par30: float
    par90: float
    provision_coverage_ratio: float
    loan_count: int
    missing_maturity_count: int = 0


@dataclass(frozen=True)
class ClassificationCriteria:
    """BOT rule tables, for display alongside reports"""

    general_loans: List[DayBucket]
    housing_microfinance: List[DayBucket]
    provision_rates: Dict[LoanCategory, float]


@dataclass
class BOTReport:
    """Regulatory submission payload for a loan book"""

    report_date: datetime
    institution_name: str
    msp_code: str
    portfolio: PortfolioClassification
    criteria: ClassificationCriteria
    tenant_id: Optional[str] = None
    compliance_status: str = "BOT_COMPLIANT"
    last_updated: Optional[datetime] = None
