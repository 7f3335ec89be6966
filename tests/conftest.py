import pytest

from carbon_api.app import create_app


@pytest.fixture
def app(tmp_path):
    return create_app({
        "TESTING": True,
        "CALCULATIONS_FILE": str(tmp_path / "calculations.json"),
    })


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def payload():
    return {
        "userId": "user-1",
        "quantity": "10",
        "unit": "pallets",
        "tonnesPerUnit": 2,
        "transportMode": "truck",
        "fuelTypes": {"diesel": True, "bev": True, "cng": False},
        "cooledTransport": False,
        "origin": "Berlin",
        "destination": "Paris",
        "originCoords": {"lat": 52.52, "lng": 13.405},
        "destinationCoords": {"lat": 48.8566, "lng": 2.3522},
    }
