"""
Formatting utilities shared by the allocation and receiving pages
"""
import pandas as pd
from datetime import datetime, date
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)


def parse_timestamp(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    """
    Parse an API timestamp into a timezone-aware UTC datetime

    Naive values are taken as UTC. Unparseable values give None.
    """
    if value is None or value == '':
        return None

    parsed = pd.to_datetime(value, utc=True, errors='coerce')
    if pd.isna(parsed):
        logger.debug(f"Unparseable timestamp: {value!r}")
        return None
    return parsed.to_pydatetime()


def format_number(value: Union[int, float, None], decimals: int = 0) -> str:
    """
    Format number with thousand separator

    Args:
        value: Number to format
        decimals: Number of decimal places

    Returns:
        Formatted string
    """
    try:
        if value is None or pd.isna(value):
            return "-"

        if decimals == 0:
            return f"{int(value):,}"
        else:
            return f"{float(value):,.{decimals}f}"

    except (ValueError, TypeError):
        return "-"


def format_date(value: Union[str, datetime, date, None],
                format_str: str = "%d/%m/%Y") -> str:
    """
    Format date consistently

    Args:
        value: Date value to format
        format_str: Output format string

    Returns:
        Formatted date string
    """
    if value is None:
        return "-"

    if isinstance(value, (datetime, date)):
        return value.strftime(format_str)

    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value) if str(value).strip() else "-"
    return parsed.strftime(format_str)


def format_quantity(value: Union[int, None], unit_name: str = 'units') -> str:
    """Quantity with its unit, e.g. '1,200 units'"""
    return f"{format_number(value)} {unit_name}"


def format_status(status: str) -> str:
    """
    Format opportunity or purchase order status with icon

    Args:
        status: opportunity status or purchase order status

    Returns:
        Formatted status string
    """
    status_map = {
        'pending': '⏳ Pending',
        'allocated': '✅ Allocated',
        'dismissed': '⏭️ Dismissed',
        'sent': '📤 Sent',
        'partially_received': '📦 Partially Received',
    }

    return status_map.get(str(status).lower(), status)
