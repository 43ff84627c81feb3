import os
import pytest
from rasteringest.config import Settings, get_settings
from rasteringest.composition.di import build_ingest_service

def pytest_configure():
    os.environ.setdefault("RASTER_LOG_LEVEL", "DEBUG")

@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # evita fuga de estado entre tests
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

@pytest.fixture
def settings() -> Settings:
    return Settings()

@pytest.fixture
def svc(settings):
    return build_ingest_service(settings)

def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in item.keywords and os.environ.get("CI") == "true":
            # marca como slow en CI si quieres escalonar
            item.add_marker(pytest.mark.slow)
