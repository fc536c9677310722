# fuelsoap/utils/datetime_utils.py
"""
Datetime utilities for SOAP message serialization.

Provides functions to format date and datetime values found in outgoing
messages as xsd:dateTime strings.
"""

from datetime import UTC, date, datetime


def format_for_soap(dt: date | datetime) -> str:
    """
    Format a date or datetime object as an xsd:dateTime string.

    Output format: YYYY-MM-DDThh:mm:ss.ccc+hh:mm

    Args:
        dt: A date or datetime object. A date is converted to midnight UTC and
            a naive datetime is assumed to be UTC.

    Returns:
        ISO 8601 formatted string suitable for a SOAP element value.

    Examples:
        >>> format_for_soap(date(2024, 6, 30))
        '2024-06-30T00:00:00.000+00:00'
        >>> format_for_soap(datetime(2024, 6, 30, 9, 0, 5))
        '2024-06-30T09:00:05.000+00:00'
    """
    if isinstance(dt, date) and not isinstance(dt, datetime):  # pyright: ignore[reportUnnecessaryIsInstance]
        dt = datetime.combine(dt, datetime.min.time(), tzinfo=UTC)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)

    date_time_part: str = dt.strftime('%Y-%m-%dT%H:%M:%S')
    milliseconds: int = dt.microsecond // 1000

    # strftime %z gives +hhmm, xsd:dateTime wants +hh:mm
    tz_offset: str = dt.strftime('%z') or '+0000'

    return f'{date_time_part}.{milliseconds:03d}{tz_offset[:3]}:{tz_offset[3:]}'
