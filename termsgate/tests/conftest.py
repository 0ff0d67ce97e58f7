import json

import pytest
import requests
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from termsgate.app.config import GateConfig
from termsgate.app.services.identity import IdentityStore
from termsgate.app.services.required_action import ExternalTermsProvider

LATEST_URL = "https://example.com/policy/latest.json"
BASE_URL_TEMPLATE = "https://example.com/policy/%1$s/%1$s.%2$s.html"


def make_response(body, status_code: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = LATEST_URL
    response.encoding = "utf-8"
    response._content = body if isinstance(body, bytes) else json.dumps(body).encode()
    return response


class FakeHttp:
    """Stands in for the host's requests.Session."""

    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def get(self, url, headers=None, **kwargs):
        self.calls.append((url, dict(headers or {})))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        pass


class RecordingRenderer:
    def __init__(self) -> None:
        self.rendered: list[tuple[str, dict]] = []

    def render(self, template, attributes):
        self.rendered.append((template, dict(attributes)))
        return {"template": template, **attributes}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def identity(session):
    return IdentityStore(session)


@pytest.fixture
def user(identity):
    return identity.create_user("alice")


@pytest.fixture
def config():
    return GateConfig(latest_policies_url=LATEST_URL, policies_base_url=BASE_URL_TEMPLATE)


@pytest.fixture
def http():
    return FakeHttp(make_response({"tos": "2024-01", "privacy": "2024-01"}))


@pytest.fixture
def provider(http, config):
    provider = ExternalTermsProvider(http)
    provider.init(config)
    return provider
