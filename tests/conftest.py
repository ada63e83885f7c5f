import pytest
from fastapi.testclient import TestClient

from formguard.main import APP_BUNDLE_DIR, app
from formguard.messages import BundleLoader, MessageInterpolator
from formguard.validators import ValidationContext, ValidationEngine
from tests.helpers import NOW


@pytest.fixture()
def client():
    """Test client with a fresh application state per test."""
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def interpolator():
    return MessageInterpolator(BundleLoader([APP_BUNDLE_DIR], default_locale="en"))


@pytest.fixture()
def engine(interpolator):
    return ValidationEngine(interpolator=interpolator)


@pytest.fixture()
def context():
    return ValidationContext(clock=lambda: NOW)
