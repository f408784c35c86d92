"""Dependency injection for FastAPI endpoints"""

from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import Request
from bot_provisioning.infrastructure.clients.loan_book import LoanBookClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_loan_book_client() -> LoanBookClient:
    """Provide loan book API client instance"""
    return LoanBookClient()


def resolve_evaluated_at(as_of: Optional[date]) -> datetime:
    """Evaluation instant for a classification run: start of as_of (UTC) or now"""
    if as_of is None:
        return datetime.now(timezone.utc)
    return datetime.combine(as_of, time.min, tzinfo=timezone.utc)
