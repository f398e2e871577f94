import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest

from brewfinder.auth.service import AuthService
from brewfinder.auth.session import SessionRegistry
from brewfinder.auth.users import CredentialStore
from brewfinder.services.search_service import FetchError

STRONG_PASSWORD = "Abcdefg1!"


@pytest.fixture()
def users_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "users.json"


@pytest.fixture()
def store(users_path: Path) -> CredentialStore:
    return CredentialStore(users_path)


@pytest.fixture()
def auth(store: CredentialStore) -> AuthService:
    return AuthService(store, SessionRegistry())


class RecordingStrategy:
    """Fetch strategy double: returns ``payload`` or raises FetchError when it is None."""

    def __init__(self, payload=None, name="fake"):
        self.payload = payload
        self.calls = []
        self.__name__ = name

    def __call__(self, url, params):
        self.calls.append((url, dict(params)))
        if self.payload is None:
            raise FetchError(f"{self.__name__} unavailable")
        return self.payload


@pytest.fixture()
def down_strategies():
    """Two strategies that both fail, as when the directory is unreachable."""
    return [RecordingStrategy(name="primary"), RecordingStrategy(name="fallback")]


@pytest.fixture()
def api_breweries():
    return [
        {
            "id": "b-1",
            "name": "Sierra Nevada Brewing Co.",
            "brewery_type": "regional",
            "address_1": "1075 E 20th St",
            "city": "Chico",
            "state_province": "California",
            "country": "United States",
            "website_url": "http://www.sierranevada.com",
            "phone": "5308933520",
        },
        {
            "id": "b-2",
            "name": "Tiny Taproom",
            "brewery_type": "taproom",
            "city": "Austin",
            "state": "Texas",
        },
    ]
