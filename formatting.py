"""
Pure display helpers for the dashboard: dates, money, category counts,
transaction status and shareable ids. Nothing here touches the network
or the database.
"""

import base64
import binascii
import re
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional
from urllib.parse import parse_qsl, urlencode
from zoneinfo import ZoneInfo

from config import get_settings
from schemas import CategoryCount, DateTimeFormats

PROCESSING_WINDOW = timedelta(days=2)

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def parse_timestamp(value: datetime | date | str) -> datetime:
    """
    Normalize a date, datetime or ISO-8601 string to an aware UTC datetime.
    Naive values are taken as UTC; date-only values land on midnight UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Unrecognized timestamp: {value!r}") from exc
    else:
        raise TypeError(f"Cannot parse timestamp from {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _clock(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_date_time(value: datetime | date | str, tz: Optional[str] = None) -> DateTimeFormats:
    """
    Four en-US renderings of a timestamp in the display timezone, e.g.
    ``Thu, May 15, 3:45 PM`` / ``Thu, 05/15/2025`` / ``May 15, 2025`` / ``3:45 PM``.
    """
    zone = ZoneInfo(tz or get_settings().display_timezone)
    local = parse_timestamp(value).astimezone(zone)
    weekday = WEEKDAYS[local.weekday()]
    month = MONTHS[local.month - 1]

    return DateTimeFormats(
        date_time=f"{weekday}, {month} {local.day}, {_clock(local)}",
        date_day=f"{weekday}, {local.month:02d}/{local.day:02d}/{local.year}",
        date_only=f"{month} {local.day}, {local.year}",
        time_only=_clock(local),
    )


def format_amount(amount: float | int | Decimal) -> str:
    """
    US dollars with two decimals and thousands separators: 1250.36 -> $1,250.36.
    Raises ValueError for NaN and infinities, which have no dollar rendering.
    """
    value = Decimal(str(amount))
    if not value.is_finite():
        raise ValueError(f"Cannot format non-finite amount: {amount!r}")
    value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def count_transaction_categories(transactions: Iterable) -> List[CategoryCount]:
    counts: dict[str, int] = {}
    total_count = 0

    for txn in transactions or []:
        category = txn.get("category") if isinstance(txn, dict) else txn.category
        category = category or ""
        counts[category] = counts.get(category, 0) + 1
        total_count += 1

    # sorted() is stable, so equal counts stay in first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [CategoryCount(name=name, count=count, total_count=total_count) for name, count in ranked]


def get_transaction_status(value: datetime | date | str, now: Optional[datetime] = None) -> str:
    """'Processing' for anything newer than two days ago, otherwise 'Success'."""
    moment = parse_timestamp(value)
    reference = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    return "Processing" if moment > reference - PROCESSING_WINDOW else "Success"


# Shareable ids are base64 so they read cleanly in a URL. This hides the raw
# id from casual view only: anyone can decode it, so never gate access on it.
def encrypt_id(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")


def decrypt_id(value: str) -> str:
    try:
        return base64.b64decode(value, altchars=b"-_", validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise ValueError(f"Not an encoded id: {value!r}") from exc


def remove_special_characters(value: str) -> str:
    return re.sub(r"[^\w\s]", "", value, flags=re.ASCII)


def extract_customer_id_from_url(url: str) -> str:
    return url.split("/")[-1]


def form_url_query(params: str, key: str, value: Optional[str], path: str = "/") -> str:
    """
    Set ``key`` in a query string and rebuild the URL for ``path``.
    Keys come out sorted and a None value drops the key.
    """
    query = dict(parse_qsl(params.lstrip("?"), keep_blank_values=True))
    query[key] = value
    kept = sorted((k, v) for k, v in query.items() if v is not None)
    if not kept:
        return path
    return f"{path}?{urlencode(kept)}"
