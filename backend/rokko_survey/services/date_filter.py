"""
Per-day record filtering.

Traffic and parking records match on a textual prefix of their `timestamp`
("YYYY-MM-DD HH:MM:SS" starts with "YYYY-MM-DD"); weather records match when
their `date` field equals the requested day exactly. No date parsing happens:
a malformed timestamp that shares the prefix still matches.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from rokko_survey.models.records import Category, Record, to_category

logger = logging.getLogger(__name__)


def matches_timestamp_prefix(record: Mapping[str, Any], date: str) -> bool:
    timestamp = record.get("timestamp")
    return isinstance(timestamp, str) and timestamp.startswith(date)


def matches_exact_date(record: Mapping[str, Any], date: str) -> bool:
    return record.get("date") == date


DATE_RULES: Dict[Category, Callable[[Mapping[str, Any], str], bool]] = {
    Category.TRAFFIC: matches_timestamp_prefix,
    Category.PARKING: matches_timestamp_prefix,
    Category.WEATHER: matches_exact_date,
}


def filter_by_date(category: Union[str, Category], records: Iterable[Record], date: Optional[str] = None) -> List[Record]:
    """Returns the records of `category` that belong to `date`; all of them when `date` is empty."""
    rule = DATE_RULES[to_category(category)]
    if not date:
        return list(records)
    return [record for record in records if rule(record, date)]
