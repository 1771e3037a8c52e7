"""
Chart-ready series derived from one category's (already date-filtered) records.

Every function is pure, preserves input order where it emits one entry per
record, and returns an empty result for empty input.
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from rokko_survey.models.records import WEATHER_LABELS, Record

logger = logging.getLogger(__name__)

# Fields never projected into the traffic time series
TRAFFIC_NON_SERIES_FIELDS = {"timestamp", "date", "id", "sensor_id"}


def time_of_day(timestamp: Any) -> str:
    """Substring after the first space of a 'YYYY-MM-DD HH:MM:SS' timestamp ('' if there is none)."""
    if not isinstance(timestamp, str):
        return ""
    _, _, time_part = timestamp.partition(" ")
    return time_part


def hour_of(timestamp: Any) -> str:
    return time_of_day(timestamp)[:2]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)


def parking_time_series(records: Iterable[Record]) -> List[Dict[str, Any]]:
    """Entries, exits and occupancy (as a percentage) per record, in input order."""
    series = []
    for item in records:
        occupancy_rate = item.get("occupancy_rate")
        series.append({
            "time": time_of_day(item.get("timestamp")),
            "entry": item.get("entry_count"),
            "exit": item.get("exit_count"),
            "occupancy": occupancy_rate * 100 if _is_number(occupancy_rate) else None,
        })
    return series


def traffic_time_series(records: Iterable[Record]) -> List[Dict[str, Any]]:
    """Time of day plus every numeric counter of each record, in input order."""
    series = []
    for item in records:
        point: Dict[str, Any] = {"time": time_of_day(item.get("timestamp"))}
        for key, value in item.items():
            if key in TRAFFIC_NON_SERIES_FIELDS or not _is_number(value):
                continue
            point[key] = value
        series.append(point)
    return series


def region_distribution(records: Iterable[Record]) -> List[Dict[str, Any]]:
    """Occurrences of each plate_region, one entry per region in first-seen order."""
    counts: Dict[str, int] = {}
    for item in records:
        region = item.get("plate_region")
        counts[region] = counts.get(region, 0) + 1
    return [{"name": region, "value": count} for region, count in counts.items()]


def hourly_average_stay(records: Iterable[Record]) -> List[Dict[str, Any]]:
    """
    Mean stay_duration per hour of the timestamp, rounded half up.
    Only hours present in the input produce an entry.
    """
    buckets: Dict[str, Dict[str, float]] = {}
    for item in records:
        hour = hour_of(item.get("timestamp"))
        bucket = buckets.setdefault(hour, {"total": 0, "count": 0})
        duration = item.get("stay_duration")
        bucket["total"] += duration if _is_number(duration) else 0
        bucket["count"] += 1
    return [
        {"hour": f"{hour}:00", "avgDuration": round_half_up(bucket["total"] / bucket["count"])}
        for hour, bucket in buckets.items()
    ]


def hourly_vehicle_totals(records: Iterable[Record]) -> List[Dict[str, Any]]:
    """Sum of vehicle_count per hour of the timestamp, first-seen hour order."""
    totals: Dict[str, float] = {}
    for item in records:
        hour = hour_of(item.get("timestamp"))
        count = item.get("vehicle_count")
        totals[hour] = totals.get(hour, 0) + (count if _is_number(count) else 0)
    return [{"hour": f"{hour}:00", "total": total} for hour, total in totals.items()]


def weather_for_date(records: Sequence[Record], date: Optional[str]) -> Optional[Record]:
    """First record (in scan order) whose date equals `date`."""
    return next((item for item in records if item.get("date") == date), None)


def weather_label(condition: Any) -> Any:
    return WEATHER_LABELS.get(condition, condition)


def _numbers(records: Iterable[Mapping[str, Any]], field: str) -> List[float]:
    return [item[field] for item in records if _is_number(item.get(field))]


def summarize_traffic(records: Sequence[Record]) -> Dict[str, Any]:
    """Count, total, mean and peak vehicle counts for the day."""
    vehicle_counts = _numbers(records, "vehicle_count")
    if not vehicle_counts:
        return {
            "count": len(records),
            "total_vehicles": 0,
            "avg_vehicle_count": None,
            "peak_vehicle_count": None,
            "peak_time": None,
        }
    peak_record = max(
        (item for item in records if _is_number(item.get("vehicle_count"))),
        key=lambda item: item["vehicle_count"],
    )
    return {
        "count": len(records),
        "total_vehicles": float(np.sum(vehicle_counts)),
        "avg_vehicle_count": float(np.mean(vehicle_counts)),
        "peak_vehicle_count": max(vehicle_counts),
        "peak_time": time_of_day(peak_record.get("timestamp")),
    }


def summarize_parking(records: Sequence[Record]) -> Dict[str, Any]:
    """Entry/exit totals, occupancy statistics (percent) and mean stay for the day."""
    entries = _numbers(records, "entry_count")
    exits = _numbers(records, "exit_count")
    occupancy = _numbers(records, "occupancy_rate")
    stays = _numbers(records, "stay_duration")
    return {
        "count": len(records),
        "total_entries": float(np.sum(entries)) if entries else 0,
        "total_exits": float(np.sum(exits)) if exits else 0,
        "avg_occupancy": float(np.mean(occupancy)) * 100 if occupancy else None,
        "peak_occupancy": max(occupancy) * 100 if occupancy else None,
        "avg_stay_duration": round_half_up(float(np.mean(stays))) if stays else None,
    }
