"""Data access layer for archived BOT reports"""

import uuid
from dataclasses import asdict
from typing import List, Optional
from sqlalchemy.orm import Session
from bot_provisioning.infrastructure.database.models import BOTReportRecord
from bot_provisioning.domain.models import BOTReport


class ReportRepository:
    """Repository for BOT reports"""

    def __init__(self, db: Session):
        self.db = db

    def create_report(self, tenant_id: str, report: BOTReport) -> BOTReportRecord:
        """Persist a generated report to the archive"""
        portfolio = report.portfolio
        db_report = BOTReportRecord(
            tenant_id=tenant_id,
            institution_name=report.institution_name,
            msp_code=report.msp_code,
            report_date=report.report_date,
            loan_count=portfolio.loan_count,
            missing_maturity_count=portfolio.missing_maturity_count,
            total_outstanding=portfolio.total_outstanding,
            total_provision_required=portfolio.total_provision_required,
            npl_ratio=portfolio.npl_ratio,
            par30=portfolio.par30,
            par90=portfolio.par90,
            provision_coverage_ratio=portfolio.provision_coverage_ratio,
            breakdown={key: asdict(bucket) for key, bucket in portfolio.breakdown.items()},
            compliance_status=report.compliance_status,
        )
        self.db.add(db_report)
        self.db.flush()  # Get ID without committing
        return db_report

    def get_report_by_id(self, report_id: uuid.UUID) -> Optional[BOTReportRecord]:
        """Fetch a single archived report"""
        return (
            self.db.query(BOTReportRecord)
            .filter(BOTReportRecord.id == report_id)
            .first()
        )

    def get_reports_by_tenant(self, tenant_id: str, limit: int = 10) -> List[BOTReportRecord]:
        """Fetch recent reports for a tenant, latest as-of date first"""
        return (
            self.db.query(BOTReportRecord)
            .filter(BOTReportRecord.tenant_id == tenant_id)
            .order_by(BOTReportRecord.report_date.desc(), BOTReportRecord.created_at.desc())
            .limit(limit)
            .all()
        )
