# backend/rokko_survey/dependencies.py

from fastapi import HTTPException, status

from .services.csv_store import CsvOverrideStore
from .services.data_source import DataSourceSelector
from .services.services import get_csv_store, get_data_source_selector

async def get_store() -> CsvOverrideStore:
    """Dependency to get the session's CSV override store."""
    try:
        return get_csv_store()
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

async def get_selector() -> DataSourceSelector:
    """Dependency to get the per-category data source selector."""
    try:
        return get_data_source_selector()
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
