# backend/rokko_survey/services/services.py
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from rokko_survey.models.records import Category
from rokko_survey.services.csv_store import CsvOverrideStore
from rokko_survey.services.data_source import DataSourceSelector
from rokko_survey.services.remote_client import SurveyApiClient

logger = logging.getLogger(__name__)

_csv_store_instance: Optional[CsvOverrideStore] = None
_api_client_instance: Optional[SurveyApiClient] = None
_selector_instance: Optional[DataSourceSelector] = None

def initialize_services(config: Dict[str, Any]):
    """Creates the session's override store, the API client and the per-category selector."""
    global _csv_store_instance, _api_client_instance, _selector_instance
    logger.info("Initializing application services...")
    if _csv_store_instance is None:
        _csv_store_instance = CsvOverrideStore()
    _api_client_instance = SurveyApiClient.from_config(config)
    _selector_instance = DataSourceSelector(store=_csv_store_instance, client=_api_client_instance)
    logger.info(f"Application services initialized (survey API: {_api_client_instance.base_url}).")

def get_csv_store() -> CsvOverrideStore:
    if _csv_store_instance is None:
        logger.error("CsvOverrideStore accessed before initialization!")
        raise RuntimeError("CsvOverrideStore not initialized.")
    return _csv_store_instance

def get_data_source_selector() -> DataSourceSelector:
    if _selector_instance is None:
        logger.error("DataSourceSelector accessed before initialization!")
        raise RuntimeError("DataSourceSelector not initialized.")
    return _selector_instance

def shutdown_services():
    """Drops all session state; uploaded overrides do not outlive the process."""
    global _csv_store_instance, _api_client_instance, _selector_instance
    logger.info("Shutting down application services...")
    _selector_instance = None
    _api_client_instance = None
    _csv_store_instance = None
    logger.info("Application services shut down.")

async def health_check() -> Dict[str, Any]:
    """Reports whether the services are up and which categories are overridden."""
    healthy = _selector_instance is not None
    overrides = {}
    if _csv_store_instance is not None:
        overrides = {category.value: _csv_store_instance.is_active(category) for category in Category}
    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "survey_api": {"base_url": _api_client_instance.base_url if _api_client_instance else None},
            "csv_overrides": overrides,
        },
    }
