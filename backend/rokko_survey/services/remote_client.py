import aiohttp
import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from rokko_survey.models.records import Category, to_category
from rokko_survey.services.exceptions import FetchFailedError, ParseFailedError


class SurveyApiClient:
    """
    Client for the field-device survey API:
    GET {base_url}/{traffic|parking|weather}[?date=YYYY-MM-DD] -> JSON array of records.
    """
    def __init__(self,
                 base_url: str,
                 timeout_seconds: Optional[float] = None,
                 session_factory: Callable[..., Any] = aiohttp.ClientSession):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session_factory = session_factory
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SurveyApiClient":
        api_config = config.get("api", {})
        return cls(
            base_url=api_config.get("base_url", "http://localhost:3001/api"),
            timeout_seconds=api_config.get("request_timeout_seconds"),
        )

    def build_url(self, category: Union[str, Category]) -> str:
        return f"{self.base_url}/{to_category(category).value}"

    async def fetch_records(self, category: Union[str, Category], date: Optional[str] = None) -> List[Dict[str, Any]]:
        """Fetch a category's records, scoped to `date` when given (the full set otherwise)."""
        category = to_category(category)
        url = self.build_url(category)
        params = {"date": date} if date else None

        try:
            async with self._session_factory(timeout=self.timeout) as session:
                async with session.get(url, params=params) as response:
                    if response.status < 200 or response.status >= 300:
                        raise FetchFailedError(category.value, f"HTTP {response.status}")
                    body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Survey API request for {category.value} failed: {e}")
            raise FetchFailedError(category.value, str(e) or type(e).__name__) from e

        try:
            payload = json.loads(body.decode("utf-8"))
        except UnicodeDecodeError as e:
            self.logger.error(f"Survey API returned non UTF-8 {category.value} payload: {e}")
            raise ParseFailedError(category.value, "response is not valid UTF-8") from e
        except ValueError as e:
            self.logger.error(f"Survey API returned undecodable {category.value} payload: {e}")
            raise ParseFailedError(category.value, "response is not valid JSON") from e

        if not isinstance(payload, list):
            raise ParseFailedError(category.value, f"expected a JSON array, got {type(payload).__name__}")

        self.logger.debug(f"Fetched {len(payload)} {category.value} record(s) for date={date}")
        return payload
