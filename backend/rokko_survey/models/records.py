import enum
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rokko_survey.services.exceptions import UnknownCategoryError

logger = logging.getLogger(__name__)

# Records travel through the pipeline as plain mappings, exactly as decoded
# from the remote JSON or the uploaded CSV.
Record = Dict[str, Any]


class Category(str, enum.Enum):
    TRAFFIC = "traffic"
    PARKING = "parking"
    WEATHER = "weather"


class WeatherCondition(str, enum.Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    SNOWY = "snowy"


WEATHER_LABELS: Dict[str, str] = {
    WeatherCondition.SUNNY.value: "晴れ",
    WeatherCondition.CLOUDY.value: "曇り",
    WeatherCondition.RAINY.value: "雨",
    WeatherCondition.SNOWY.value: "雪",
}

CATEGORY_LABELS: Dict[Category, str] = {
    Category.TRAFFIC: "交通量",
    Category.PARKING: "駐車場",
    Category.WEATHER: "天気",
}


class TrafficRecord(BaseModel):
    """One traffic count event. Extra per-vehicle-class counters are allowed."""
    model_config = ConfigDict(extra="allow")

    timestamp: str = Field(..., examples=["2024-01-15 08:30:00"], description="Local date and time, 'YYYY-MM-DD HH:MM:SS'")
    vehicle_count: int = Field(..., ge=0, examples=[12], description="Vehicles counted in the interval")


class ParkingRecord(BaseModel):
    timestamp: str = Field(..., examples=["2024-01-15 09:00:00"], description="Local date and time, 'YYYY-MM-DD HH:MM:SS'")
    entry_count: int = Field(..., ge=0, examples=[3])
    exit_count: int = Field(..., ge=0, examples=[1])
    occupancy_rate: float = Field(..., ge=0, le=1, examples=[0.65], description="Occupancy as a fraction (0.0 to 1.0)")
    plate_region: str = Field(..., examples=["神戸"], description="Region printed on the licence plate")
    stay_duration: int = Field(..., ge=0, examples=[45], description="Stay duration in minutes")


class WeatherRecord(BaseModel):
    date: str = Field(..., examples=["2024-01-15"], description="Day, 'YYYY-MM-DD'")
    weather: WeatherCondition = Field(..., examples=[WeatherCondition.SUNNY])
    temperature: float = Field(..., examples=[4.5], description="Temperature in °C")
    humidity: int = Field(..., ge=0, le=100, examples=[60], description="Relative humidity in percent")


RECORD_MODELS = {
    Category.TRAFFIC: TrafficRecord,
    Category.PARKING: ParkingRecord,
    Category.WEATHER: WeatherRecord,
}


def expected_columns(category: Union[str, Category]) -> List[str]:
    """CSV header columns an upload for `category` is expected to carry."""
    return list(RECORD_MODELS[to_category(category)].model_fields)

# Field whose presence identifies a record as belonging to a category
DISTINGUISHING_FIELDS: Dict[Category, str] = {
    Category.TRAFFIC: "vehicle_count",
    Category.PARKING: "plate_region",
    Category.WEATHER: "weather",
}


def to_category(value: Union[str, Category]) -> Category:
    try:
        return Category(value)
    except ValueError:
        raise UnknownCategoryError(str(value)) from None


def is_traffic_record(record: Any) -> bool:
    return isinstance(record, Mapping) and "vehicle_count" in record


def is_parking_record(record: Any) -> bool:
    return isinstance(record, Mapping) and "plate_region" in record


def is_weather_record(record: Any) -> bool:
    return isinstance(record, Mapping) and "weather" in record


DISCRIMINATORS: Dict[Category, Callable[[Any], bool]] = {
    Category.TRAFFIC: is_traffic_record,
    Category.PARKING: is_parking_record,
    Category.WEATHER: is_weather_record,
}


def select_records(category: Union[str, Category], records: Optional[Iterable[Any]]) -> List[Record]:
    """
    Keeps only the records carrying the category's distinguishing field.
    Non-matching rows are dropped silently (a filter, not an error).
    """
    if not records:
        return []
    matches = DISCRIMINATORS[to_category(category)]
    selected = []
    dropped = 0
    for record in records:
        if matches(record):
            selected.append(record)
        else:
            dropped += 1
    if dropped:
        logger.debug(f"Excluded {dropped} record(s) without '{DISTINGUISHING_FIELDS[to_category(category)]}' from {to_category(category).value} view")
    return selected
