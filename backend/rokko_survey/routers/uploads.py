# backend/rokko_survey/routers/uploads.py
from typing import List
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
import logging

from rokko_survey.dependencies import get_store
from rokko_survey.ingest.csv_parser import parse_csv
from rokko_survey.models.dashboard import OverrideStatus
from rokko_survey.models.records import Category, expected_columns
from rokko_survey.services.csv_store import CsvOverrideStore
from rokko_survey.services.exceptions import CsvParseError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get(
    "/",
    response_model=List[OverrideStatus],
    summary="Override status of every category",
)
async def list_overrides(store: CsvOverrideStore = Depends(get_store)) -> List[OverrideStatus]:
    return [OverrideStatus(**entry) for entry in store.statuses()]

@router.post(
    "/{category}",
    response_model=OverrideStatus,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a CSV that replaces the category's live data",
    description="The uploaded rows replace any earlier upload for the category; the survey API is not queried while the override is active.",
)
async def upload_csv(
    category: Category,
    file: UploadFile = File(...),
    store: CsvOverrideStore = Depends(get_store),
) -> OverrideStatus:
    payload = await file.read()
    try:
        records = parse_csv(category, payload)
    except CsvParseError as e:
        logger.warning(f"Rejected {category.value} upload '{file.filename}': {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    store.upload(category, records)
    return OverrideStatus(**store.status(category))

@router.delete(
    "/{category}",
    response_model=OverrideStatus,
    summary="Clear the category's CSV override",
)
async def clear_csv(category: Category, store: CsvOverrideStore = Depends(get_store)) -> OverrideStatus:
    store.clear(category)
    return OverrideStatus(**store.status(category))

@router.get(
    "/{category}/columns",
    response_model=List[str],
    summary="CSV columns expected for the category",
)
async def get_expected_columns(category: Category) -> List[str]:
    return expected_columns(category)
