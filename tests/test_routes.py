import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.models.user import SessionUser


@pytest.fixture
def app(api, provider, storage):
    return create_app(api_client=api, identity_provider=provider, storage=storage)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def logged_in(app):
    app.state.auth_session.user = SessionUser(id="user-1", name="Tarnished")
    return app.state.auth_session


def test_root_and_health(client):
    assert client.get("/").json()["ok"] is True
    assert client.get("/health").json() == {"ok": True, "service": "Tarnished Tactics"}


def test_health_backend_reports_error(client, http, respond):
    http.request.return_value = respond(500, {"error": "down"})

    body = client.get("/health/backend").json()

    assert body["ok"] is False
    assert body["error"] == "down"
    assert body["api_url"] == "http://backend.test"


def test_startup_initializes_identity(app, provider):
    with TestClient(app) as client:
        state = client.get("/auth/session").json()
    assert state["is_initialized"] is True
    assert state["loading"] is False
    assert provider.config is not None


def test_nav_items(client, logged_in):
    items = client.get("/nav", params={"path": "/guides"}).json()["items"]

    assert [i["label"] for i in items] == ["Home", "Builds", "Guides", "My Builds"]
    assert [i["active"] for i in items] == [False, False, True, False]


def test_nav_signed_out_hides_my_builds(client):
    labels = [i["label"] for i in client.get("/nav").json()["items"]]
    assert "My Builds" not in labels


def test_callback_signs_in(client, http, respond, token):
    http.request.return_value = respond(200, {})

    res = client.post("/auth/callback", json={"credential": token()})

    assert res.status_code == 200
    body = res.json()
    assert body["is_authenticated"] is True
    assert body["user"]["email"] == "melina@example.com"
    assert "token" not in body["user"]


def test_callback_rejects_garbage(client):
    res = client.post("/auth/callback", json={"credential": "garbage"})
    assert res.status_code == 400


def test_signout_failure_is_500(client, logged_in, provider):
    provider.fail_disable = True
    assert client.post("/auth/signout").status_code == 500


def test_signout(client, logged_in):
    body = client.post("/auth/signout").json()
    assert body["is_authenticated"] is False


def test_build_list_page(client, http, respond, build_data):
    http.request.return_value = respond(200, {"builds": [build_data()]})

    page = client.get("/builds").json()

    assert page["state"] == "populated"
    assert page["items"][0]["name"] == "Bleed Samurai"


def test_build_detail_not_found(client, http, respond):
    http.request.return_value = respond(404, {"error": "Build not found"})

    res = client.get("/builds/nope")

    assert res.status_code == 404
    assert res.json()["title"] == "Build Not Found"
    assert res.json()["back_link"] == "/builds"


def test_create_build_requires_sign_in(client, http):
    res = client.post("/builds", json={"name": "X"})

    assert res.status_code == 401
    assert res.json()["detail"] == "You must be signed in to create builds"
    http.request.assert_not_called()


def test_create_build_missing_name(client, logged_in, http):
    res = client.post("/builds", json={"description": "no name"})

    assert res.status_code == 400
    assert res.json()["detail"] == "Build name is required"
    http.request.assert_not_called()


def test_create_build_unknown_class(client, logged_in):
    res = client.post("/builds", json={"name": "X", "class": "Knight"})
    assert res.status_code == 400


def test_create_build(client, logged_in, http, respond, build_data):
    http.request.return_value = respond(201, build_data(_id="new"))

    res = client.post("/builds", json={"name": "New", "stats": {"vigor": ""}, "rightHand": "Dagger, Dagger"})

    assert res.status_code == 201
    assert res.json()["_id"] == "new"
    sent = http.request.call_args.kwargs["json"]
    assert sent["stats"]["vigor"] == 0
    assert sent["equipment"]["rightHand"] == ["Dagger", "Dagger"]
    assert sent["level"] == 71


def test_preview_computes_level(client):
    body = client.post("/builds/preview", json={"stats": {"vigor": "99"}}).json()
    assert body["form"]["level"] == 1 + 99 + 7 * 10
    assert body["mode"] == "create"


def test_backend_5xx_becomes_502(client, logged_in, http, respond):
    http.request.return_value = respond(500, {"error": "Database unavailable"})

    res = client.post("/guides", json={"title": "T", "description": "D", "content": "C"})

    assert res.status_code == 502
    assert res.json()["detail"] == "Database unavailable"


def test_delete_build_other_owner(client, logged_in, http, respond, build_data):
    http.request.return_value = respond(200, build_data(userId="user-2"))

    res = client.delete("/builds/b1")

    assert res.status_code == 403
    assert http.request.call_count == 1


def test_delete_build_redirects(client, logged_in, http, respond, build_data):
    http.request.side_effect = [respond(200, build_data()), respond(200, {})]

    res = client.delete("/builds/b1")

    assert res.json() == {"ok": True, "redirect": "/builds"}


def test_update_guide_refetches(client, logged_in, http, respond, guide_data):
    http.request.side_effect = [
        respond(200, guide_data()),
        respond(200, guide_data(title="New title")),
        respond(200, guide_data(title="New title")),
    ]

    res = client.put("/guides/g1", json={"title": "New title"})

    assert res.status_code == 200
    assert res.json()["guide"]["title"] == "New title"
    assert [c.args[0] for c in http.request.call_args_list] == ["GET", "PUT", "GET"]


def test_generate_guide_route(client, logged_in, http, respond, build_data):
    http.request.side_effect = [
        respond(200, build_data()),
        respond(200, {"guideData": {"title": "Draft", "description": "d", "content": "c"}}),
    ]

    page = client.post("/builds/b1/generate-guide").json()

    assert page["guide_editor"]["form"]["title"] == "Draft"
    assert page["guide_editor"]["mode"] == "create"


def test_my_builds_signed_out(client, http):
    page = client.get("/my-builds").json()
    assert page["state"] == "auth_required"
    http.request.assert_not_called()


def test_my_builds_delete_single_request(client, logged_in, http, respond, build_data):
    http.request.side_effect = [respond(200, [build_data(), build_data(_id="b2")]), respond(200, {})]

    page = client.delete("/my-builds/b1").json()

    assert [i["id"] for i in page["items"]] == ["b2"]
    delete_calls = [c for c in http.request.call_args_list if c.args[0] == "DELETE"]
    assert len(delete_calls) == 1
    assert delete_calls[0].kwargs["json"] == {"userId": "user-1"}


def test_guide_options(client):
    body = client.get("/guides/options").json()
    assert body["difficulties"] == ["Easy", "Medium", "Hard"]


def test_auth_config_matches_provider_config(client, app, provider):
    body = client.get("/auth/config").json()
    config = app.state.auth_session.provider_config()

    assert body["client_id"] == config.client_id
    assert body["auto_select"] is False
    assert body["cancel_on_tap_outside"] is True
    assert body["login_uri"] == "/auth/callback"


def test_malformed_build_list_is_error_page(client, http, respond, build_data):
    http.request.return_value = respond(200, {"builds": [build_data(level=None)]})

    res = client.get("/builds")

    assert res.status_code == 200
    assert res.json()["state"] == "error"
    assert res.json()["error"] == "Failed to fetch builds"


def test_null_build_detail_is_not_found_page(client, http, respond):
    http.request.return_value = respond(200, None)

    res = client.get("/builds/b1")

    assert res.status_code == 502
    assert res.json()["title"] == "Build Not Found"
    assert res.json()["back_link"] == "/builds"


def test_update_saved_but_reload_failed_is_200(client, logged_in, http, respond, build_data):
    http.request.side_effect = [
        respond(200, build_data()),
        respond(200, build_data(name="Renamed")),
        respond(500, {"error": "Database unavailable"}),
    ]

    res = client.put("/builds/b1", json={"name": "Renamed"})

    assert res.status_code == 200
    assert res.json()["build"]["name"] == "Renamed"
    assert res.json()["action_error"] == "Database unavailable"
