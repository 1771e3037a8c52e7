"""
Turns an uploaded CSV file into record dicts for the override store.

Text-valued columns are kept verbatim so that date matching stays a plain
string comparison; every other column is left to pandas' numeric inference.
Empty cells become None. No further cleansing is done.
"""
import io
import logging
from typing import Any, Dict, List, Union

import pandas as pd

from rokko_survey.models.records import Category, to_category
from rokko_survey.services.exceptions import CsvParseError

logger = logging.getLogger(__name__)

TEXT_COLUMNS = ["timestamp", "date", "weather", "plate_region"]


def _decode(payload: Union[str, bytes]) -> str:
    if isinstance(payload, bytes):
        try:
            return payload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CsvParseError(f"CSV is not valid UTF-8: {e}") from e
    return payload.lstrip("\ufeff")


def parse_csv(category: Union[str, Category], payload: Union[str, bytes]) -> List[Dict[str, Any]]:
    category = to_category(category)
    text = _decode(payload)
    if not text.strip():
        raise CsvParseError(f"Uploaded {category.value} CSV is empty")

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype={column: str for column in TEXT_COLUMNS},
            # Only empty cells are missing; "NA", "None", "null" stay as written
            keep_default_na=False,
            na_values=[""],
            skipinitialspace=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise CsvParseError(f"Could not parse {category.value} CSV: {e}") from e

    df.columns = [str(column).strip() for column in df.columns]
    df = df.astype(object).where(pd.notna(df), None)
    records = df.to_dict(orient="records")
    logger.info(f"Parsed {len(records)} row(s) from {category.value} CSV ({len(df.columns)} column(s))")
    return records
