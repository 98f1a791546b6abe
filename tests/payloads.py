"""Canned OpenWeather bodies shared by the test modules."""

import copy

LONDON_CURRENT = {
    "name": "London",
    "sys": {"country": "GB", "sunrise": 1700000000, "sunset": 1700040000},
    "main": {"temp": 10, "feels_like": 9, "humidity": 80, "pressure": 1012},
    "wind": {"speed": 3},
    "weather": [{"description": "clear sky", "icon": "01d"}],
    "clouds": {"all": 0},
}

PARIS_FORECAST = {
    "city": {"name": "Paris", "country": "FR"},
    "list": [
        {
            "dt_txt": "2024-05-01 12:00:00",
            "main": {"temp": 18, "feels_like": 17.5, "temp_min": 16, "temp_max": 19, "humidity": 60, "pressure": 1015},
            "wind": {"speed": 4.2},
            "weather": [{"description": "few clouds", "icon": "02d"}],
            "clouds": {"all": 20},
            "pop": 0.25,
        },
        {
            "dt_txt": "2024-05-01 15:00:00",
            "main": {"temp": 20, "feels_like": 19, "temp_min": 18, "temp_max": 21, "humidity": 55, "pressure": 1014},
            "wind": {"speed": 5},
            "weather": [{"description": "light rain", "icon": "10d"}],
            "clouds": {"all": 75},
        },
    ],
}


def current_payload(name="London", temp=10, wind_speed=3, **overrides):
    """Return a deep copy of the London body with a few fields changed."""
    payload = copy.deepcopy(LONDON_CURRENT)
    payload["name"] = name
    payload["main"]["temp"] = temp
    payload["wind"]["speed"] = wind_speed
    payload.update(overrides)
    return payload


def forecast_payload():
    return copy.deepcopy(PARIS_FORECAST)
