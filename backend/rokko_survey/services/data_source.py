import logging
from typing import Dict, Iterable, Optional, Union

from rokko_survey.models.dashboard import FetchState
from rokko_survey.models.records import Category, Record, select_records, to_category
from rokko_survey.services.csv_store import CsvOverrideStore
from rokko_survey.services.date_filter import filter_by_date
from rokko_survey.services.exceptions import DataSourceError
from rokko_survey.services.remote_client import SurveyApiClient

logger = logging.getLogger(__name__)

SOURCE_OVERRIDE = "override"
SOURCE_REMOTE = "remote"


class CategoryDataSource:
    """
    Decides, per resolution, whether a category is served from uploaded
    override rows or from the survey API, and holds the resulting
    (data, loading, error) state.

    Every resolution takes a new sequence number. A remote result is only
    committed if no newer resolution has started in the meantime, so a slow
    response for an earlier date can never overwrite a later one.
    """

    def __init__(self, category: Union[str, Category], client: SurveyApiClient):
        self.category = to_category(category)
        self._client = client
        self._state = FetchState()
        self._sequence = 0

    @property
    def state(self) -> FetchState:
        return self._state.model_copy(deep=True)

    def _commit(self, ticket: int, **changes) -> bool:
        if ticket != self._sequence:
            logger.debug(f"Discarding superseded {self.category.value} resolution #{ticket} (latest is #{self._sequence})")
            return False
        self._state = self._state.model_copy(update=changes)
        return True

    def _settle(self, ticket: int, **changes) -> FetchState:
        """Commit a finished resolution, or report it as superseded without touching the shared state."""
        changes["loading"] = False
        if self._commit(ticket, **changes):
            return self.state
        return FetchState(**{"data": [], **changes}, superseded=True)

    async def resolve(self,
                      date: Optional[str],
                      override_active: bool,
                      override_records: Optional[Iterable[Record]] = None) -> FetchState:
        """
        Resolve the category for `date` and return this resolution's outcome.

        The returned state is the committed one while this resolution is still
        the latest. If a newer one started meanwhile, it carries only this
        resolution's own result and has `superseded` set.
        """
        self._sequence += 1
        ticket = self._sequence

        if override_active:
            # Never touches the remote source, even when nothing matches the date
            rows = filter_by_date(self.category, select_records(self.category, override_records), date)
            return self._settle(ticket, data=rows, error=None, source=SOURCE_OVERRIDE)

        self._commit(ticket, loading=True, error=None, source=SOURCE_REMOTE)
        try:
            payload = await self._client.fetch_records(self.category, date)
        except DataSourceError as e:
            logger.error(f"Resolution #{ticket} for {self.category.value} (date={date}) failed: {e}")
            return self._settle(ticket, error=str(e), source=SOURCE_REMOTE)
        except Exception as e:
            logger.exception(f"Unexpected error in resolution #{ticket} for {self.category.value} (date={date})")
            self._commit(ticket, loading=False, error=str(e) or type(e).__name__)
            raise
        return self._settle(ticket, data=select_records(self.category, payload), error=None, source=SOURCE_REMOTE)


class DataSourceSelector:
    """One independent CategoryDataSource per category, sharing the session's override store."""

    def __init__(self, store: CsvOverrideStore, client: SurveyApiClient):
        self.store = store
        self.client = client
        self._sources: Dict[Category, CategoryDataSource] = {
            category: CategoryDataSource(category, client) for category in Category
        }

    def source(self, category: Union[str, Category]) -> CategoryDataSource:
        return self._sources[to_category(category)]

    async def resolve(self, category: Union[str, Category], date: Optional[str] = None) -> FetchState:
        category = to_category(category)
        return await self.source(category).resolve(
            date,
            self.store.is_active(category),
            self.store.records(category),
        )
