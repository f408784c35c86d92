"""Prometheus metrics for monitoring classification outcomes and portfolio health"""

from prometheus_client import Counter, Histogram, Gauge

from bot_provisioning.domain.models import ClassificationResult, PortfolioClassification

# Classification metrics
classification_counter = Counter(
    "bot_classification_total",
    "Loans classified under BOT guidelines",
    ["category", "loan_type"],
)

portfolio_size_histogram = Histogram(
    "bot_portfolio_loan_count",
    "Number of loans per portfolio classification",
    buckets=[1, 10, 100, 500, 1000, 5000, 10000],
)

# Portfolio health, updated on each archived report
npl_ratio_gauge = Gauge(
    "bot_npl_ratio_percent",
    "Non-performing loan ratio from the latest report",
    ["tenant_id"],
)

par30_gauge = Gauge(
    "bot_par30_percent",
    "Portfolio at risk over 30 days from the latest report",
    ["tenant_id"],
)

# Loan book API metrics
loan_book_fetch_failures_counter = Counter(
    "loan_book_fetch_failures_total",
    "Failed loan book API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_classification(classification: ClassificationResult) -> None:
    """Record a single loan classification"""
    loan_type = "housing_microfinance" if classification.is_housing_microfinance else "general"
    classification_counter.labels(category=classification.category.value, loan_type=loan_type).inc()


def record_portfolio(portfolio: PortfolioClassification, tenant_id: str | None = None) -> None:
    """Record portfolio size and, for a tenant's report, its health gauges"""
    portfolio_size_histogram.observe(portfolio.loan_count)

    if tenant_id is not None:
        npl_ratio_gauge.labels(tenant_id=tenant_id).set(portfolio.npl_ratio)
        par30_gauge.labels(tenant_id=tenant_id).set(portfolio.par30)
