"""Date manipulation utilities"""

import logging
import math
from datetime import date, datetime, time
from typing import Any, Optional
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month"""
    return moment + relativedelta(months=months)


def days_elapsed_since(start: date, moment: datetime) -> int:
    """Whole days from midnight of start to moment, rounded up, never negative"""
    start_of_day = datetime.combine(start, time.min, tzinfo=moment.tzinfo)
    elapsed = (moment - start_of_day).total_seconds()
    if elapsed <= 0:
        return 0
    return math.ceil(elapsed / SECONDS_PER_DAY)


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse an ISO date (or datetime) string; None when absent or unparseable"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("Unparseable date value", extra={"value": str(value)})
        return None
