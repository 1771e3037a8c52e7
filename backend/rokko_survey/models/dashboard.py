# backend/rokko_survey/models/dashboard.py
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from rokko_survey.models.records import Category


class FetchState(BaseModel):
    """Per-category resolution result: the (data, loading, error) triple."""
    data: List[Dict[str, Any]] = Field(default_factory=list)
    loading: bool = True
    error: Optional[str] = None
    source: Optional[str] = Field(None, examples=["override", "remote"], description="Where the committed data came from")
    superseded: bool = Field(False, description="A newer resolution for the category started before this one finished")


class ParkingPoint(BaseModel):
    time: str = Field(..., examples=["09:00:00"])
    entry: Any = None
    exit: Any = None
    occupancy: Optional[float] = Field(None, description="Occupancy in percent")


class RegionShare(BaseModel):
    name: Any = Field(..., examples=["神戸"])
    value: int = Field(..., ge=0)


class HourlyStay(BaseModel):
    hour: str = Field(..., examples=["09:00"])
    avgDuration: int = Field(..., description="Average stay in minutes, rounded half up")


class HourlyTotal(BaseModel):
    hour: str = Field(..., examples=["09:00"])
    total: float = 0


class TrafficSeries(BaseModel):
    time_series: List[Dict[str, Any]] = Field(default_factory=list)
    hourly_totals: List[HourlyTotal] = Field(default_factory=list)


class ParkingSeries(BaseModel):
    time_series: List[ParkingPoint] = Field(default_factory=list)
    region_distribution: List[RegionShare] = Field(default_factory=list)
    hourly_stay: List[HourlyStay] = Field(default_factory=list)


class WeatherSummary(BaseModel):
    date: str
    weather: Any = None
    label: Any = Field(None, examples=["晴れ"])
    temperature: Any = None
    humidity: Any = None


class CategoryDashboard(FetchState):
    category: Category
    date: Optional[str] = None
    error_message: Optional[str] = Field(None, description="Display message naming the category and the error")
    summary: Dict[str, Any] = Field(default_factory=dict)


class TrafficDashboard(CategoryDashboard):
    series: TrafficSeries = Field(default_factory=TrafficSeries)


class ParkingDashboard(CategoryDashboard):
    series: ParkingSeries = Field(default_factory=ParkingSeries)


class WeatherDashboard(CategoryDashboard):
    today: Optional[WeatherSummary] = None


class OverrideStatus(BaseModel):
    category: Category
    active: bool
    record_count: int = Field(..., ge=0)
