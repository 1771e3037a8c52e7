import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

from rokko_survey.models.records import Category, Record, select_records, to_category
from rokko_survey.services.date_filter import filter_by_date

logger = logging.getLogger(__name__)


@dataclass
class CategoryOverrideState:
    """Uploaded override data for one category. `records` is empty whenever `active` is False."""
    active: bool = False
    records: List[Record] = field(default_factory=list)


class CsvOverrideStore:
    """
    Session-scoped holder of user-uploaded CSV data, one independent
    CategoryOverrideState per category. Uploads replace a category's rows
    wholesale; nothing is merged and nothing is persisted.
    """

    def __init__(self):
        self._states: Dict[Category, CategoryOverrideState] = {
            category: CategoryOverrideState() for category in Category
        }

    def _state(self, category: Union[str, Category]) -> CategoryOverrideState:
        return self._states[to_category(category)]

    def upload(self, category: Union[str, Category], records: Iterable[Record]):
        """Replaces the category's rows and marks the override active."""
        state = self._state(category)
        state.records = list(records)
        state.active = True
        logger.info(f"CSV override for '{to_category(category).value}' replaced with {len(state.records)} record(s)")

    def clear(self, category: Union[str, Category]):
        state = self._state(category)
        state.records = []
        state.active = False
        logger.info(f"CSV override for '{to_category(category).value}' cleared")

    def is_active(self, category: Union[str, Category]) -> bool:
        return self._state(category).active

    def records(self, category: Union[str, Category]) -> List[Record]:
        return list(self._state(category).records)

    def record_count(self, category: Union[str, Category]) -> int:
        return len(self._state(category).records)

    def get_filtered(self, category: Union[str, Category], date: Optional[str] = None) -> List[Record]:
        """Category-shaped rows for `date` (all rows when `date` is empty)."""
        shaped = select_records(category, self._state(category).records)
        return filter_by_date(category, shaped, date)

    def status(self, category: Union[str, Category]) -> Dict[str, object]:
        category = to_category(category)
        return {
            "category": category,
            "active": self.is_active(category),
            "record_count": self.record_count(category),
        }

    def statuses(self) -> List[Dict[str, object]]:
        return [self.status(category) for category in Category]
