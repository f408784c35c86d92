"""BOT loan classification and provisioning engine - core business logic

Implements the Bank of Tanzania guidelines for loan classification and
provisioning:

- General loans: 0-5 days (Current), 6-30 (Especially Mentioned),
  31-60 (Substandard), 61-90 (Doubtful), 91+ (Loss)
- Housing microfinance loans: 0-90 (Current), 91-180 (Substandard),
  181-360 (Doubtful), 361+ (Loss); no Especially Mentioned category
- Provision rates: Current 1%, ESM 5%, Substandard 25%, Doubtful 50%, Loss 100%

Every function is pure. The evaluation instant is always passed in by the
caller so that classification runs can be reproduced or backdated.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Tuple

from bot_provisioning.domain.models import (
    BOTReport,
    CategoryBucket,
    ClassificationCriteria,
    ClassificationResult,
    DayBucket,
    LoanCategory,
    LoanRecord,
    LoanType,
    PortfolioClassification,
)
from bot_provisioning.utils.date_utils import add_months, days_elapsed_since

GENERAL_LOAN_BUCKETS: Tuple[DayBucket, ...] = (
    DayBucket(LoanCategory.CURRENT, 0, 5),
    DayBucket(LoanCategory.ESPECIALLY_MENTIONED, 6, 30),
    DayBucket(LoanCategory.SUBSTANDARD, 31, 60),
    DayBucket(LoanCategory.DOUBTFUL, 61, 90),
    DayBucket(LoanCategory.LOSS, 91, None),
)

HOUSING_MICROFINANCE_BUCKETS: Tuple[DayBucket, ...] = (
    DayBucket(LoanCategory.CURRENT, 0, 90),
    DayBucket(LoanCategory.SUBSTANDARD, 91, 180),
    DayBucket(LoanCategory.DOUBTFUL, 181, 360),
    DayBucket(LoanCategory.LOSS, 361, None),
)

BUCKETS_BY_LOAN_TYPE: Dict[LoanType, Tuple[DayBucket, ...]] = {
    LoanType.GENERAL: GENERAL_LOAN_BUCKETS,
    LoanType.HOUSING_MICROFINANCE: HOUSING_MICROFINANCE_BUCKETS,
}

PROVISION_RATES: Dict[LoanCategory, float] = {
    LoanCategory.CURRENT: 0.01,
    LoanCategory.ESPECIALLY_MENTIONED: 0.05,
    LoanCategory.SUBSTANDARD: 0.25,
    LoanCategory.DOUBTFUL: 0.50,
    LoanCategory.LOSS: 1.00,
}

# Portfolio breakdown keys, in reporting order
BREAKDOWN_KEYS: Dict[LoanCategory, str] = {
    LoanCategory.CURRENT: "current",
    LoanCategory.ESPECIALLY_MENTIONED: "esm",
    LoanCategory.SUBSTANDARD: "substandard",
    LoanCategory.DOUBTFUL: "doubtful",
    LoanCategory.LOSS: "loss",
}

NON_PERFORMING = (LoanCategory.SUBSTANDARD, LoanCategory.DOUBTFUL, LoanCategory.LOSS)

# Review interval in months
REVIEW_INTERVAL_MONTHS: Dict[LoanCategory, int] = {
    LoanCategory.CURRENT: 3,
    LoanCategory.ESPECIALLY_MENTIONED: 1,
    LoanCategory.SUBSTANDARD: 1,
    LoanCategory.DOUBTFUL: 1,
    LoanCategory.LOSS: 1,
}

COMPLIANCE_RATE_TOLERANCE = 0.001


def calculate_days_past_due(maturity_date: Optional[date], evaluated_at: datetime) -> int:
    """
    Days elapsed since maturity, rounded up to whole days.

    A loan that has not yet matured, or has no maturity date, is 0 days past due.
    """
    if maturity_date is None:
        return 0
    return days_elapsed_since(maturity_date, evaluated_at)


def find_category(days_past_due: int, loan_type: LoanType) -> LoanCategory:
    """First bucket of the loan type's table containing days_past_due; Loss beyond the table"""
    for bucket in BUCKETS_BY_LOAN_TYPE[loan_type]:
        if bucket.contains(days_past_due):
            return bucket.category
    return LoanCategory.LOSS


def calculate_next_review_date(category: LoanCategory, classification_date: datetime) -> datetime:
    """Current loans are reviewed quarterly, everything else monthly"""
    return add_months(classification_date, REVIEW_INTERVAL_MONTHS[category])


def classify_loan(loan: LoanRecord, evaluated_at: datetime) -> ClassificationResult:
    """
    Classify a single loan and compute its provision.

    provision_amount is outstanding_amount * provision_rate, unrounded;
    callers round for currency display.
    """
    days_past_due = calculate_days_past_due(loan.maturity_date, evaluated_at)
    category = find_category(days_past_due, loan.loan_type)
    provision_rate = PROVISION_RATES[category]

    return ClassificationResult(
        category=category,
        days_past_due=days_past_due,
        provision_rate=provision_rate,
        provision_amount=loan.outstanding_amount * provision_rate,
        is_housing_microfinance=loan.loan_type == LoanType.HOUSING_MICROFINANCE,
        classification_date=evaluated_at,
        next_review_date=calculate_next_review_date(category, evaluated_at),
        maturity_date_missing=loan.maturity_date is None,
    )


def _percentage(part: float, whole: float) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def classify_portfolio(loans: Sequence[LoanRecord], evaluated_at: datetime) -> PortfolioClassification:
    """
    Aggregate classifications over a loan book.

    - NPL ratio: share of outstanding amount in Substandard, Doubtful and Loss
    - PAR30/PAR90: share of loan count more than 30/90 days past due
    - Provision coverage: total provision over total outstanding
    All ratios are percentages and default to 0 for an empty book.
    """
    breakdown = {key: CategoryBucket() for key in BREAKDOWN_KEYS.values()}
    par30_count = 0
    par90_count = 0
    missing_maturity_count = 0

    for loan in loans:
        classification = classify_loan(loan, evaluated_at)

        bucket = breakdown[BREAKDOWN_KEYS[classification.category]]
        bucket.count += 1
        bucket.amount += loan.outstanding_amount
        bucket.provision += classification.provision_amount

        if classification.days_past_due > 30:
            par30_count += 1
        if classification.days_past_due > 90:
            par90_count += 1
        if classification.maturity_date_missing:
            missing_maturity_count += 1

    # Totals are summed from the buckets so they always reconcile with the breakdown
    total_outstanding = sum(bucket.amount for bucket in breakdown.values())
    total_provision = sum(bucket.provision for bucket in breakdown.values())
    non_performing = sum(breakdown[BREAKDOWN_KEYS[category]].amount for category in NON_PERFORMING)
    loan_count = len(loans)

    return PortfolioClassification(
        breakdown=breakdown,
        total_outstanding=total_outstanding,
        total_provision_required=total_provision,
        npl_ratio=_percentage(non_performing, total_outstanding),
        par30=_percentage(par30_count, loan_count),
        par90=_percentage(par90_count, loan_count),
        provision_coverage_ratio=_percentage(total_provision, total_outstanding),
        loan_count=loan_count,
        missing_maturity_count=missing_maturity_count,
    )


def validate_bot_compliance(
    loan: LoanRecord,
    classification: ClassificationResult,
    evaluated_at: datetime,
) -> bool:
    """True if the supplied classification matches a fresh one in category and provision rate"""
    expected = classify_loan(loan, evaluated_at)
    return (
        expected.category == classification.category
        and abs(expected.provision_rate - classification.provision_rate) < COMPLIANCE_RATE_TOLERANCE
    )


def get_classification_criteria() -> ClassificationCriteria:
    """BOT rule tables for display purposes"""
    return ClassificationCriteria(
        general_loans=list(GENERAL_LOAN_BUCKETS),
        housing_microfinance=list(HOUSING_MICROFINANCE_BUCKETS),
        provision_rates=dict(PROVISION_RATES),
    )


def generate_bot_report(
    loans: List[LoanRecord],
    evaluated_at: datetime,
    institution_name: str,
    msp_code: str,
    tenant_id: Optional[str] = None,
) -> BOTReport:
    """Main entry point for regulatory submission: classify the book and attach the criteria"""
    return BOTReport(
        report_date=evaluated_at,
        institution_name=institution_name,
        msp_code=msp_code,
        portfolio=classify_portfolio(loans, evaluated_at),
        criteria=get_classification_criteria(),
        tenant_id=tenant_id,
        last_updated=evaluated_at,
    )
