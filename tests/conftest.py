import httpx
import pytest

from stub_backend import create_stub_app

from mimanasa.config import Settings
from mimanasa.controller import AppController
from mimanasa.services.http_client import create_http_client
from mimanasa.services.library_api import LibraryAPI
from mimanasa.session import SessionManager
from mimanasa.storage import MemoryKeyValueStore, StorageError

STUB_BASE_URL = "http://testserver/api"


class BrokenStore:
    """Store whose every operation fails."""

    def get(self, key):
        raise StorageError("disk on fire")

    def set(self, key, value):
        raise StorageError("disk on fire")

    def remove(self, key):
        raise StorageError("disk on fire")


@pytest.fixture
def test_settings():
    return Settings(api_base_url=STUB_BASE_URL)


@pytest.fixture
def stub_app():
    return create_stub_app()


@pytest.fixture
def make_api(stub_app, test_settings):
    def _make(transport=None):
        transport = transport or httpx.ASGITransport(app=stub_app)
        return LibraryAPI(create_http_client(test_settings, transport=transport))
    return _make


@pytest.fixture
def api(make_api):
    return make_api()


@pytest.fixture
def offline_api(make_api):
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)
    return make_api(httpx.MockTransport(refuse))


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def sessions(store):
    return SessionManager(store)


@pytest.fixture
def controller(api, sessions, test_settings):
    return AppController(api, sessions, config=test_settings)


@pytest.fixture
def broken_store():
    return BrokenStore()
