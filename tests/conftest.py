import json
import pathlib
import pytest
from clinic_portal.client import ClinicApiClient
from clinic_portal.session import SessionStore
from clinic_portal.storage import MemoryStorage

FIX = pathlib.Path(__file__).parent / "fixtures"
BASE = "http://clinic.test"


def load(name: str) -> dict:
    return json.loads((FIX / name).read_text(encoding="utf-8"))


def signed_in_storage(role: str = "admin", token: str = "abc") -> MemoryStorage:
    return MemoryStorage({
        "token": token,
        "user": json.dumps({"id": "1", "email": "admin@clinica.test", "role": role}),
    })


@pytest.fixture
def session() -> SessionStore:
    return SessionStore(signed_in_storage(), base_url=BASE)


@pytest.fixture
def anonymous() -> SessionStore:
    return SessionStore(MemoryStorage(), base_url=BASE)


@pytest.fixture
def api(session) -> ClinicApiClient:
    return ClinicApiClient(session, base_url=BASE)
