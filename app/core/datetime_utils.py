"""
Datetime utilities for handling timezone-aware datetimes
"""

from datetime import datetime, timezone
from typing import Dict, Any, Optional

def utcnow() -> datetime:
    """Current time as naive UTC, the form every timestamp column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Shift an aware datetime to UTC and drop the tzinfo; naive values are assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

def convert_timezone_aware_datetimes(data: Dict[str, Any], datetime_fields: list = None) -> Dict[str, Any]:
    """
    Convert timezone-aware datetimes to naive UTC for database compatibility

    Args:
        data: Dictionary containing data with potential datetime fields
        datetime_fields: List of field names that contain datetimes. If None, checks common fields.

    Returns:
        Dictionary with converted datetime fields
    """
    if datetime_fields is None:
        datetime_fields = ['departure_at', 'return_at', 'start_date', 'end_date', 'created_at', 'updated_at']

    for field in datetime_fields:
        if isinstance(data.get(field), datetime):
            data[field] = to_naive_utc(data[field])

    return data
