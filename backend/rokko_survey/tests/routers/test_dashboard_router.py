import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock
import httpx
from fastapi.testclient import TestClient

from rokko_survey.main import app
from rokko_survey.dependencies import get_selector
from rokko_survey.models.records import Category
from rokko_survey.services.csv_store import CsvOverrideStore
from rokko_survey.services.data_source import DataSourceSelector
from rokko_survey.services.exceptions import FetchFailedError
from rokko_survey.services.remote_client import SurveyApiClient

PARKING_ROWS = [
    {"timestamp": "2024-01-15 09:00:00", "entry_count": 3, "exit_count": 1, "occupancy_rate": 0.5,
     "plate_region": "神戸", "stay_duration": 30},
    {"timestamp": "2024-01-15 09:30:00", "entry_count": 2, "exit_count": 0, "occupancy_rate": 0.75,
     "plate_region": "神戸", "stay_duration": 50},
    {"timestamp": "2024-01-15 10:15:00", "entry_count": 1, "exit_count": 2, "occupancy_rate": 0.25,
     "plate_region": "大阪", "stay_duration": 15},
    {"timestamp": "2024-01-16 10:15:00", "entry_count": 9, "exit_count": 9, "occupancy_rate": 1.0,
     "plate_region": "姫路", "stay_duration": 99},
]


class TestDashboardRouter(unittest.TestCase):

    def setUp(self):
        self.store = CsvOverrideStore()
        self.client_mock = MagicMock(spec=SurveyApiClient)
        self.client_mock.fetch_records = AsyncMock(return_value=[])
        self.selector = DataSourceSelector(self.store, self.client_mock)

        self.original_overrides = app.dependency_overrides.copy()
        app.dependency_overrides[get_selector] = lambda: self.selector
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides = self.original_overrides

    def test_parking_override_series(self):
        self.store.upload(Category.PARKING, PARKING_ROWS)

        response = self.client.get("/api/v1/dashboard/parking", params={"date": "2024-01-15"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source"], "override")
        self.assertEqual(len(body["data"]), 3)
        self.assertIsNone(body["error"])
        series = body["series"]
        self.assertEqual(series["time_series"][0], {"time": "09:00:00", "entry": 3, "exit": 1, "occupancy": 50.0})
        self.assertEqual(series["hourly_stay"], [{"hour": "09:00", "avgDuration": 40},
                                                 {"hour": "10:00", "avgDuration": 15}])
        self.assertEqual({entry["name"]: entry["value"] for entry in series["region_distribution"]},
                         {"神戸": 2, "大阪": 1})
        self.assertEqual(body["summary"]["total_entries"], 6)
        self.client_mock.fetch_records.assert_not_awaited()

    def test_traffic_remote_success(self):
        self.client_mock.fetch_records.return_value = [
            {"timestamp": "2024-01-15 08:00:00", "vehicle_count": 12},
            {"timestamp": "2024-01-15 08:30:00", "vehicle_count": 8},
        ]

        response = self.client.get("/api/v1/dashboard/traffic?date=2024-01-15")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source"], "remote")
        self.assertEqual(body["series"]["hourly_totals"], [{"hour": "08:00", "total": 20}])
        self.assertEqual(body["series"]["time_series"][1], {"time": "08:30:00", "vehicle_count": 8})
        self.client_mock.fetch_records.assert_awaited_once_with(Category.TRAFFIC, "2024-01-15")

    def test_remote_failure_is_reported_in_body(self):
        self.client_mock.fetch_records.side_effect = FetchFailedError("parking", "HTTP 500")

        response = self.client.get("/api/v1/dashboard/parking?date=2024-01-15")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["error"], "Failed to fetch parking data: HTTP 500")
        self.assertEqual(body["error_message"], "駐車場データの取得に失敗しました: Failed to fetch parking data: HTTP 500")
        self.assertEqual(body["data"], [])
        self.assertEqual(body["series"]["hourly_stay"], [])

    def test_weather_first_match_and_label(self):
        self.client_mock.fetch_records.return_value = [
            {"date": "2024-01-15", "weather": "rainy", "temperature": 3.0, "humidity": 90},
            {"date": "2024-01-15", "weather": "sunny", "temperature": 8.0, "humidity": 40},
        ]

        response = self.client.get("/api/v1/dashboard/weather?date=2024-01-15")

        body = response.json()
        self.assertEqual(body["today"]["weather"], "rainy")
        self.assertEqual(body["today"]["label"], "雨")
        self.assertEqual(body["today"]["humidity"], 90)

    def test_weather_without_match_has_no_today(self):
        self.store.upload(Category.WEATHER, [{"date": "2024-01-14", "weather": "snowy", "temperature": -1, "humidity": 70}])

        body = self.client.get("/api/v1/dashboard/weather?date=2024-01-15").json()

        self.assertIsNone(body["today"])
        self.assertEqual(body["data"], [])
        self.assertIsNone(body["error"])

    def test_no_date_returns_all_override_rows(self):
        self.store.upload(Category.PARKING, PARKING_ROWS)
        body = self.client.get("/api/v1/dashboard/parking").json()
        self.assertEqual(len(body["data"]), 4)
        self.assertIsNone(body["date"])

    def test_malformed_date_is_rejected(self):
        response = self.client.get("/api/v1/dashboard/traffic?date=15-01-2024")
        self.assertEqual(response.status_code, 422)
        self.client_mock.fetch_records.assert_not_awaited()

    def test_error_does_not_chart_rows_from_previous_date(self):
        self.client_mock.fetch_records.return_value = PARKING_ROWS[:3]
        self.client.get("/api/v1/dashboard/parking?date=2024-01-15")
        self.client_mock.fetch_records.side_effect = FetchFailedError("parking", "HTTP 503")

        body = self.client.get("/api/v1/dashboard/parking?date=2024-01-16").json()

        self.assertEqual(len(body["data"]), 3)
        self.assertEqual(body["date"], "2024-01-16")
        self.assertEqual(body["series"], {"time_series": [], "region_distribution": [], "hourly_stay": []})
        self.assertEqual(body["summary"]["count"], 0)

    def test_weather_error_has_no_today(self):
        self.client_mock.fetch_records.return_value = [
            {"date": "2024-01-15", "weather": "sunny", "temperature": 8.0, "humidity": 40},
        ]
        self.client.get("/api/v1/dashboard/weather?date=2024-01-15")
        self.client_mock.fetch_records.side_effect = FetchFailedError("weather", "HTTP 500")

        body = self.client.get("/api/v1/dashboard/weather?date=2024-01-15").json()

        self.assertIsNone(body["today"])
        self.assertEqual(body["error_message"], "天気データの取得に失敗しました: Failed to fetch weather data: HTTP 500")

    def test_non_string_values_are_rendered(self):
        self.client_mock.fetch_records.return_value = [
            {"timestamp": "2024-01-15 09:00:00", "entry_count": "3", "exit_count": 1, "occupancy_rate": 0.5,
             "plate_region": 123, "stay_duration": 30},
        ]

        response = self.client.get("/api/v1/dashboard/parking?date=2024-01-15")

        self.assertEqual(response.status_code, 200)
        series = response.json()["series"]
        self.assertEqual(series["region_distribution"], [{"name": 123, "value": 1}])
        self.assertEqual(series["time_series"][0]["entry"], "3")

    def test_unknown_weather_condition_is_shown_as_is(self):
        self.client_mock.fetch_records.return_value = [{"date": "2024-01-15", "weather": 7, "temperature": 1, "humidity": 50}]

        body = self.client.get("/api/v1/dashboard/weather?date=2024-01-15").json()

        self.assertEqual(body["today"]["weather"], 7)
        self.assertEqual(body["today"]["label"], 7)


class TestDashboardRouterConcurrency(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.client_mock = MagicMock(spec=SurveyApiClient)
        self.client_mock.fetch_records = AsyncMock(return_value=[])
        self.selector = DataSourceSelector(CsvOverrideStore(), self.client_mock)
        self.original_overrides = app.dependency_overrides.copy()
        app.dependency_overrides[get_selector] = lambda: self.selector
        self.http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")

    async def asyncTearDown(self):
        await self.http.aclose()
        app.dependency_overrides = self.original_overrides

    async def test_overlapping_requests_each_get_their_own_date(self):
        release_first = asyncio.Event()
        first_started = asyncio.Event()

        async def fetch(category, date):
            if date == "2024-01-15":
                first_started.set()
                await release_first.wait()
            return [{"timestamp": f"{date} 08:00:00", "vehicle_count": 1 if date == "2024-01-15" else 2}]

        self.client_mock.fetch_records.side_effect = fetch

        first = asyncio.create_task(self.http.get("/api/v1/dashboard/traffic", params={"date": "2024-01-15"}))
        await first_started.wait()
        second = await self.http.get("/api/v1/dashboard/traffic", params={"date": "2024-01-16"})
        release_first.set()
        first_body = (await first).json()
        second_body = second.json()

        self.assertEqual(second_body["date"], "2024-01-16")
        self.assertEqual(second_body["data"], [{"timestamp": "2024-01-16 08:00:00", "vehicle_count": 2}])
        self.assertFalse(second_body["superseded"])

        self.assertEqual(first_body["date"], "2024-01-15")
        self.assertEqual(first_body["data"], [{"timestamp": "2024-01-15 08:00:00", "vehicle_count": 1}])
        self.assertFalse(first_body["loading"])
        self.assertTrue(first_body["superseded"])
        self.assertEqual(first_body["series"]["hourly_totals"], [{"hour": "08:00", "total": 1}])

        self.assertEqual(self.selector.source(Category.TRAFFIC).state.data, second_body["data"])


if __name__ == '__main__':
    unittest.main()
