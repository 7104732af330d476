import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from lenslocked.app import create_app
from lenslocked.config import Config
from lenslocked.services.container import Services


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    """Development-style config pointing at a throwaway SQLite file and image root."""
    return Config(
        env="test",
        database_url=f"sqlite:///{tmp_path / 'lenslocked_test.db'}",
        images_dir=str(tmp_path / "images"),
        pepper="test-pepper",
        hmac_key="test-hmac-key",
        csrf_key="test-csrf-key",
    )


@pytest.fixture()
def services(config: Config):
    s = Services.from_config(config)
    s.destructive_reset()
    yield s
    s.close()


@pytest.fixture()
def app(config, services):
    return create_app(config, services)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def other_client(app) -> TestClient:
    """A second browser with its own cookie jar."""
    return TestClient(app)


def csrf_token(client: TestClient) -> str:
    if not client.cookies.get("csrf_token"):
        client.get("/")
    return client.cookies.get("csrf_token")


def signup(client: TestClient, email: str, password: str = "secretpw", name: str = "Test"):
    return client.post(
        "/signup",
        data={"name": name, "email": email, "password": password, "csrf_token": csrf_token(client)},
        follow_redirects=False,
    )
