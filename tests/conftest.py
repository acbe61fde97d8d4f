import pytest

from fakes import FakeResponse, FakeSession, geoapify_feature


@pytest.fixture
def fake_session():
    def make(status=200, json_body=None, text="", error=None, json_error=None):
        return FakeSession(
            FakeResponse(status, json_body, text, json_error=json_error), error=error
        )

    return make


@pytest.fixture
def three_features():
    return {
        "type": "FeatureCollection",
        "features": [
            geoapify_feature("Curia on the Drag", 29.6521, -82.3251),
            geoapify_feature("Opus Coffee", 29.6489, -82.3432),
            geoapify_feature("Karma Cream", 29.6537, -82.3374),
        ],
    }
