from datetime import date, datetime, time, timedelta
from typing import Optional


def apply_date_range(query, column, date_from: Optional[date] = None, date_to: Optional[date] = None):
    """Filters `column` to [date_from 00:00, date_to + 1 day). Both bounds optional and inclusive by day."""
    if date_from:
        query = query.filter(column >= datetime.combine(date_from, time.min))
    if date_to:
        query = query.filter(column < datetime.combine(date_to + timedelta(days=1), time.min))
    return query
