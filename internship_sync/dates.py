"""Due-date parsing and expiry classification."""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Iterable, List, Optional, Union

from .models import ClassifiedRecord, ListingRecord

logger = logging.getLogger("internship_sync")

DUE_DATE_PATTERN = re.compile(
    r"due\s+([A-Za-z]+\.?)\s*(\d{1,2}),?\s*(\d{4})",
    re.IGNORECASE,
)

_MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)
MONTHS = {name: index for index, name in enumerate(_MONTH_NAMES, start=1)}
MONTHS.update({name[:3]: index for name, index in list(MONTHS.items())})
MONTHS["sept"] = 9

DateLike = Union[dt.date, dt.datetime]


def parse_due_date(text: str) -> Optional[dt.date]:
    """Return the date in a "due <Month> <Day>, <Year>" phrase, or None."""
    match = DUE_DATE_PATTERN.search(text or "")
    if not match:
        return None
    month_token, day, year = match.groups()
    month = MONTHS.get(month_token.rstrip(".").lower())
    if month is None:
        return None
    try:
        return dt.date(int(year), month, int(day))
    except ValueError:
        return None


def _as_day(value: DateLike) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def is_expired(due: DateLike, reference: DateLike) -> bool:
    """True when ``due`` falls on a calendar day strictly before ``reference``."""
    return _as_day(due) < _as_day(reference)


def classify(record: ListingRecord, reference: DateLike) -> ClassifiedRecord:
    due = parse_due_date(record.label)
    if due is None:
        logger.debug("No due date in %r; treating as active", record.label)
        return ClassifiedRecord(record=record, due_date=None, is_expired=False)
    return ClassifiedRecord(
        record=record,
        due_date=due,
        is_expired=is_expired(due, reference),
    )


def classify_records(
    records: Iterable[ListingRecord],
    reference: Optional[DateLike] = None,
) -> List[ClassifiedRecord]:
    """Classify every record against ``reference`` (defaults to today)."""
    today = _as_day(reference) if reference is not None else dt.date.today()
    return [classify(record, today) for record in records]
