from fastapi import FastAPI
from fastapi.testclient import TestClient

from features.dashboard.routes.dashboard_routes import router

from tests.test_dashboard_session import make_session

def make_app():
    app = FastAPI()
    app.include_router(router)
    app.state.dashboard_session = make_session()
    return TestClient(app)

def test_dashboard_before_any_location():
    response = make_app().get("/dashboard")
    assert response.status_code == 200
    body = response.json()
    assert body["location"]["query"] == "Mentone"
    assert body["summary"] is None
    assert body["forecast_cards"] == []
    assert [c["label"] for c in body["direction_columns"]] == ["N", "E", "S", "W"]

def test_change_location():
    response = make_app().post("/dashboard/location", json={"query": "Torquay"})
    assert response.status_code == 200
    body = response.json()
    assert body["location"]["resolved_name"] == "Torquay, Victoria"
    assert body["location"]["error"] == ""

def test_change_location_not_found():
    response = make_app().post("/dashboard/location", json={"query": "Atlantis"})
    assert response.status_code == 200
    assert response.json()["location"]["error"] == "Location not found. Please try again."

def test_empty_location_is_rejected():
    response = make_app().post("/dashboard/location", json={"query": ""})
    assert response.status_code == 422

def test_change_model():
    client = make_app()
    response = client.put("/dashboard/model", json={"model": "bom_access_global"})
    assert response.status_code == 200
    assert response.json()["model"] == "bom_access_global"

    assert client.put("/dashboard/model", json={"model": "nope"}).status_code == 400

def test_replace_preferences():
    client = make_app()
    response = client.put(
        "/dashboard/preferences",
        json={"min_wind_speed": 15, "max_wind_speed": 25, "preferred_directions": ["w", "SW"]}
    )
    assert response.status_code == 200
    assert response.json()["preferences"]["preferred_directions"] == ["SW", "W"]

    bad = client.put("/dashboard/preferences", json={"min_wind_speed": 25, "max_wind_speed": 15})
    assert bad.status_code == 422

def test_toggle_direction():
    client = make_app()
    response = client.post("/dashboard/preferences/directions/N/toggle")
    assert response.status_code == 200
    assert "N" in response.json()["preferred_directions"]
    assert client.post("/dashboard/preferences/directions/UP/toggle").status_code == 400

def test_toggle_station():
    client = make_app()
    assert client.post("/dashboard/stations/95872/toggle").json() == ["94870"]
    assert client.post("/dashboard/stations/12345/toggle").status_code == 404

def test_refresh_observations():
    response = make_app().post("/dashboard/observations/refresh")
    assert response.status_code == 200
    names = [s["name"] for s in response.json()["stations"]]
    assert names == ["St Kilda", "Station 94870"]

def test_display_options():
    client = make_app()
    response = client.put("/dashboard/display", json={"show_api_data": True})
    assert response.json() == {"hide_unsuitable": True, "show_coordinates": False, "show_api_data": True}
    assert client.get("/dashboard").json()["diagnostics"] is not None
