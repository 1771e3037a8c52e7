# backend/rokko_survey/routers/dashboard.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
import logging

from rokko_survey.dependencies import get_selector
from rokko_survey.models.dashboard import (
    FetchState,
    ParkingDashboard,
    ParkingSeries,
    TrafficDashboard,
    TrafficSeries,
    WeatherDashboard,
    WeatherSummary,
)
from rokko_survey.models.records import CATEGORY_LABELS, Category
from rokko_survey.services import aggregator
from rokko_survey.services.data_source import DataSourceSelector

router = APIRouter()
logger = logging.getLogger(__name__)

DATE_QUERY = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$", description="Day to show (YYYY-MM-DD); omit for every record")


def describe_error(category: Category, error: Optional[str]) -> Optional[str]:
    """Display message naming the failed category, e.g. '駐車場データの取得に失敗しました: ...'."""
    if not error:
        return None
    return f"{CATEGORY_LABELS[category]}データの取得に失敗しました: {error}"


def _chart_rows(state: FetchState) -> list:
    # Rows kept from an earlier resolution after a failure belong to another date
    return [] if state.error else state.data


def _base_fields(category: Category, date: Optional[str], state: FetchState) -> dict:
    return {
        **state.model_dump(),
        "category": category,
        "date": date,
        "error_message": describe_error(category, state.error),
    }


@router.get(
    "/traffic",
    response_model=TrafficDashboard,
    summary="Traffic counts for a day",
    description="Resolves traffic records from the CSV override or the survey API and derives the chart series.",
)
async def get_traffic_dashboard(
    date: Optional[str] = DATE_QUERY,
    selector: DataSourceSelector = Depends(get_selector),
) -> TrafficDashboard:
    state = await selector.resolve(Category.TRAFFIC, date)
    rows = _chart_rows(state)
    return TrafficDashboard(
        **_base_fields(Category.TRAFFIC, date, state),
        summary=aggregator.summarize_traffic(rows),
        series=TrafficSeries(
            time_series=aggregator.traffic_time_series(rows),
            hourly_totals=aggregator.hourly_vehicle_totals(rows),
        ),
    )


@router.get(
    "/parking",
    response_model=ParkingDashboard,
    summary="Parking activity for a day",
    description="Entry/exit/occupancy series, plate region distribution and hourly average stay.",
)
async def get_parking_dashboard(
    date: Optional[str] = DATE_QUERY,
    selector: DataSourceSelector = Depends(get_selector),
) -> ParkingDashboard:
    state = await selector.resolve(Category.PARKING, date)
    rows = _chart_rows(state)
    return ParkingDashboard(
        **_base_fields(Category.PARKING, date, state),
        summary=aggregator.summarize_parking(rows),
        series=ParkingSeries(
            time_series=aggregator.parking_time_series(rows),
            region_distribution=aggregator.region_distribution(rows),
            hourly_stay=aggregator.hourly_average_stay(rows),
        ),
    )


@router.get(
    "/weather",
    response_model=WeatherDashboard,
    summary="Weather for a day",
    description="The first weather record matching the date, with its display label.",
)
async def get_weather_dashboard(
    date: Optional[str] = DATE_QUERY,
    selector: DataSourceSelector = Depends(get_selector),
) -> WeatherDashboard:
    state = await selector.resolve(Category.WEATHER, date)
    today = None
    if date and not state.error:
        match = aggregator.weather_for_date(state.data, date)
        if match is not None:
            today = WeatherSummary(
                date=date,
                weather=match.get("weather"),
                label=aggregator.weather_label(match.get("weather")),
                temperature=match.get("temperature"),
                humidity=match.get("humidity"),
            )
    return WeatherDashboard(**_base_fields(Category.WEATHER, date, state), today=today)
