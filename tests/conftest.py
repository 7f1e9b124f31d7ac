# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from database import create_db_engine, create_session_factory, init_db
from services.cache_service import CacheLayer
from services.container import build_services
from services.row_store import RowStoreAdapter, SqlRowBackend
from utils.security import create_access_token

ADMIN_ID = "100000000000000001"
USER_ID = "200000000000000002"


class FakeClock:
     """Monotonic clock the tests advance by hand."""

     def __init__(self, start: float = 1000.0):
          self.now = start

     def __call__(self) -> float:
          return self.now

     def advance(self, seconds: float) -> None:
          self.now += seconds


@pytest.fixture
def session_factory():
     engine = create_db_engine("sqlite://")
     init_db(engine)
     yield create_session_factory(engine)
     engine.dispose()


@pytest.fixture
def backend(session_factory):
     return SqlRowBackend(session_factory)


@pytest.fixture
def store(backend):
     return RowStoreAdapter(backend)


@pytest.fixture
def clock():
     return FakeClock()


@pytest.fixture
def cache(clock):
     return CacheLayer.in_memory(clock=clock)


@pytest.fixture
def services(backend, cache):
     return build_services(backend=backend, cache=cache, webhook_url="", default_admins=[ADMIN_ID])


@pytest.fixture
def ledger(services):
     return services.ledger


@pytest.fixture
def client(services):
     from main import create_app

     app = create_app(services)
     with TestClient(app) as test_client:
          yield test_client


def auth_headers(discord_id: str, role: str = "User") -> dict:
     token = create_access_token({"discordId": discord_id, "role": role})
     return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(services):
     services.users.create_user(ADMIN_ID, "Admin", "Boss")
     return auth_headers(ADMIN_ID, "Admin")


@pytest.fixture
def user_headers(services):
     services.users.create_user(USER_ID, "User", "Seller")
     return auth_headers(USER_ID)
