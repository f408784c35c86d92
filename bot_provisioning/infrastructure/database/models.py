"""SQLAlchemy ORM models for the BOT report archive"""

import uuid
from sqlalchemy import Column, Float, DateTime, Integer, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BOTReportRecord(Base):
    """Archived BOT classification report for a tenant's loan book"""

    __tablename__ = "bot_report"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Text, nullable=False, index=True)
    institution_name = Column(Text, nullable=False)
    msp_code = Column(Text, nullable=False)
    report_date = Column(DateTime(timezone=True), nullable=False)
    loan_count = Column(Integer, nullable=False)
    missing_maturity_count = Column(Integer, nullable=False, default=0)
    total_outstanding = Column(Float, nullable=False)
    total_provision_required = Column(Float, nullable=False)
    npl_ratio = Column(Float, nullable=False)
    par30 = Column(Float, nullable=False)
    par90 = Column(Float, nullable=False)
    provision_coverage_ratio = Column(Float, nullable=False)
    breakdown = Column(JSON, nullable=False)
    compliance_status = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
