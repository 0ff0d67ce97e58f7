import pytest
import requests
from fastapi.testclient import TestClient
from sqlmodel import Session

from conftest import FakeHttp
from termsgate.app.deps import db_session
from termsgate.app.main import app as default_app, create_app
from termsgate.app.services.required_action import ExternalTermsProvider


def test_app_title():
    assert default_app.title == "termsgate API"


def test_router_tags_present():
    tags = {tag for route in default_app.routes for tag in getattr(route, "tags", [])}
    assert {"users", "required-actions"}.issubset(tags)


@pytest.fixture
def client(engine, provider):
    app = create_app()

    def override_session():
        with Session(engine) as session:
            yield session
            session.commit()

    app.dependency_overrides[db_session] = override_session
    app.state.terms_provider = provider
    return TestClient(app)


def _create_user(client, username="bob"):
    resp = client.post("/users/", json={"username": username})
    assert resp.status_code == 201
    return resp.json()["id"]


def test_unknown_user_is_404(client):
    assert client.post("/required-actions/missing/evaluate").status_code == 404


def test_full_accept_flow(client):
    user_id = _create_user(client)

    resp = client.post(f"/required-actions/{user_id}/evaluate")
    assert resp.status_code == 200
    assert resp.json() == {"user_id": user_id, "status": "triggered", "action_required": True}

    page = client.get(f"/required-actions/{user_id}/challenge")
    assert page.status_code == 200
    assert "https://example.com/policy/tos/tos.2024-01.html" in page.text
    assert "https://example.com/policy/privacy/privacy.2024-01.html" in page.text
    assert 'name="agreed_tos" value="2024-01"' in page.text

    resp = client.post(
        f"/required-actions/{user_id}/process",
        data={"agreed_tos": "2024-01", "agreed_privacy": "2024-01", "accept": "yes"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["outcome"] == "accepted"
    assert body["status"] == "completed"
    assert body["required_actions"] == []

    detail = client.get(f"/users/{user_id}").json()
    assert detail["attributes"] == {"agreed_privacy": "2024-01", "agreed_tos": "2024-01"}

    resp = client.post(f"/required-actions/{user_id}/evaluate")
    assert resp.json()["status"] == "satisfied"
    assert client.get(f"/required-actions/{user_id}/challenge").status_code == 204


def test_cancel_flow_redirects_to_deletion(client):
    user_id = _create_user(client)
    client.post(f"/required-actions/{user_id}/evaluate")

    resp = client.post(f"/required-actions/{user_id}/process", data={"cancel": "yes"})

    body = resp.json()
    assert body["outcome"] == "cancelled_to_deletion"
    assert body["status"] == "redirected"
    assert body["required_actions"] == ["delete_account"]
    assert client.get(f"/users/{user_id}").json()["attributes"] == {}


def test_fetch_failure_is_generic_bad_gateway(client, config):
    provider = ExternalTermsProvider(FakeHttp(error=requests.ConnectionError("down")))
    provider.init(config)
    client.app.state.terms_provider = provider
    user_id = _create_user(client)

    resp = client.post(f"/required-actions/{user_id}/evaluate")

    assert resp.status_code == 502
    assert "2024" not in resp.text
    detail = client.get(f"/users/{user_id}").json()
    assert detail["required_actions"] == []
    assert detail["attributes"] == {}


def test_cancel_sent_as_file_part_still_redirects(client):
    user_id = _create_user(client)
    client.post(f"/required-actions/{user_id}/evaluate")

    resp = client.post(
        f"/required-actions/{user_id}/process",
        data={"agreed_tos": "2024-01", "agreed_privacy": "2024-01"},
        files={"cancel": ("c.txt", b"x")},
    )

    body = resp.json()
    assert body["outcome"] == "cancelled_to_deletion"
    assert body["required_actions"] == ["delete_account"]
    assert client.get(f"/users/{user_id}").json()["attributes"] == {}


def test_challenge_fetch_failure_is_generic_bad_gateway(client, config):
    provider = ExternalTermsProvider(FakeHttp(error=requests.ConnectionError("down")))
    provider.init(config)
    client.app.state.terms_provider = provider
    user_id = _create_user(client)

    resp = client.get(f"/required-actions/{user_id}/challenge")

    assert resp.status_code == 502
    assert resp.json() == {"detail": "Unable to complete the required action"}
    detail = client.get(f"/users/{user_id}").json()
    assert detail["required_actions"] == []
    assert detail["attributes"] == {}
