import unittest

from fastapi.testclient import TestClient

from app.config import Settings
from app.data_sources import CallableWeatherProvider
from app.errors import UpstreamError
from app.history_store import HistoryStore
from app.main import create_app
from tests.payloads import current_payload, forecast_payload


def _default_current(city, timeout=None):
    return current_payload(name=city)


def _default_forecast(city, timeout=None):
    return forecast_payload()


class TestApi(unittest.TestCase):
    def setUp(self):
        self.current = _default_current
        self.forecast = _default_forecast
        provider = CallableWeatherProvider(
            current=lambda city, timeout=None: self.current(city, timeout=timeout),
            forecast=lambda city, timeout=None: self.forecast(city, timeout=timeout),
        )
        self.store = HistoryStore("sqlite://")
        settings = Settings(openweather_api_key="k", database_url=None)
        self.app = create_app(settings, provider=provider, store=self.store)
        self.client = TestClient(self.app)

    def tearDown(self):
        self.store.close()

    def test_root_lists_endpoints(self):
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "running")
        self.assertIn("/api/weather/alerts", data["endpoints"])
        self.assertEqual(len(data["endpoints"]), 5)

    def test_current_london(self):
        resp = self.client.get("/api/weather/current", params={"city": "London"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["city"], "London")
        self.assertEqual(data["country"], "GB")
        self.assertEqual(data["temperature"], 10)
        self.assertEqual(data["wind_direction"], 0)
        self.assertEqual(data["visibility"], 0)
        self.assertEqual(data["sunrise"], "2023-11-14T22:13:20.000Z")

    def test_missing_city_is_400(self):
        for path in ("/api/weather/current", "/api/weather/forecast", "/api/weather/history"):
            resp = self.client.get(path)
            self.assertEqual(resp.status_code, 400, path)
            self.assertEqual(resp.json(), {"error": "City parameter is required"})

    def test_upstream_status_is_passed_through(self):
        def not_found(city, timeout=None):
            raise UpstreamError("city not found", 404)

        self.current = not_found
        resp = self.client.get("/api/weather/current", params={"city": "Atlantis"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "city not found"})

    def test_missing_api_key_is_500_without_leaking(self):
        from app.data_sources import OpenWeatherClient

        app = create_app(
            Settings(openweather_api_key=None, database_url=None),
            provider=OpenWeatherClient(None),
            store=HistoryStore(None),
        )
        resp = TestClient(app).get("/api/weather/forecast", params={"city": "Paris"})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "API key not configured"})

    def test_transport_error_body_hides_api_key(self):
        import requests

        from app.data_sources import OpenWeatherClient

        class RefusingSession:
            def get(self, url, params=None, timeout=None):
                raise requests.exceptions.ConnectionError(
                    f"Max retries exceeded with url: /data/2.5/weather?q=London&appid={params['appid']}&units=metric"
                )

        store = HistoryStore(None)
        app = create_app(
            Settings(openweather_api_key="SUPERSECRETKEY", database_url=None),
            provider=OpenWeatherClient("SUPERSECRETKEY", session=RefusingSession()),
            store=store,
        )
        resp = TestClient(app).get("/api/weather/current", params={"city": "London"})
        self.assertEqual(resp.status_code, 500)
        self.assertNotIn("SUPERSECRETKEY", resp.text)
        self.assertIn("ConnectionError", resp.json()["error"])

    def test_forecast(self):
        resp = self.client.get("/api/weather/forecast", params={"city": "Paris"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["city"], "Paris")
        self.assertEqual(len(data["forecast"]), 2)
        self.assertEqual(data["forecast"][0]["pop"], 25)

    def test_history_round_trip(self):
        self.client.get("/api/weather/current", params={"city": "London"})
        self.store.flush()

        resp = self.client.get("/api/weather/history", params={"city": "LONDON", "limit": "5"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["city"], "LONDON")
        self.assertEqual(data["count"], 1)
        self.assertEqual(data["history"][0]["city"], "London")
        self.assertNotIn("message", data)

    def test_history_without_database(self):
        app = create_app(
            Settings(openweather_api_key="k", database_url=None),
            provider=CallableWeatherProvider(current=_default_current, forecast=_default_forecast),
            store=HistoryStore(None),
        )
        resp = TestClient(app).get("/api/weather/history", params={"city": "London"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {"city": "London", "count": 0, "history": [], "message": "Database not available"},
        )

    def test_history_bad_limit_is_400(self):
        resp = self.client.get("/api/weather/history", params={"city": "London", "limit": "lots"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Limit must be an integer"})

    def test_cities_drops_failures(self):
        def flaky(city, timeout=None):
            if city == "Sydney":
                raise UpstreamError("timeout", 500)
            return current_payload(name=city)

        self.current = flaky
        resp = self.client.get("/api/weather/cities")
        self.assertEqual(resp.status_code, 200)
        cities = resp.json()["cities"]
        self.assertEqual(len(cities), 7)
        self.assertNotIn("Sydney", [c["city"] for c in cities])
        self.assertEqual(
            set(cities[0]),
            {"city", "country", "temperature", "description", "icon", "humidity", "wind_speed"},
        )

    def test_alerts_hot_and_windy(self):
        self.current = lambda city, timeout=None: current_payload(name=city, temp=40, wind_speed=25)
        resp = self.client.post("/api/weather/alerts", json={"city": "London", "email": "a@b.c"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["alert_count"], 2)
        self.assertEqual(
            [(a["type"], a["severity"]) for a in data["alerts"]],
            [("heat", "high"), ("wind", "medium")],
        )

    def test_alerts_missing_city(self):
        resp = self.client.post("/api/weather/alerts", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "City is required"})

        no_body = self.client.post("/api/weather/alerts")
        self.assertEqual(no_body.status_code, 400)

    def test_alerts_city_not_found(self):
        def not_found(city, timeout=None):
            raise UpstreamError("city not found", 404)

        self.current = not_found
        resp = self.client.post("/api/weather/alerts", json={"city": "Atlantis"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "City not found"})

    def test_cors_allows_frontend_origin(self):
        resp = self.client.get("/", headers={"Origin": "http://localhost:3000"})
        self.assertEqual(resp.headers.get("access-control-allow-origin"), "http://localhost:3000")


if __name__ == "__main__":
    unittest.main()
