import pytest
import requests

from app.services.api_client import ApiError, TacticsApiClient


def test_list_builds_parses_envelope(api, http, respond, build_data):
    http.request.return_value = respond(200, {"builds": [build_data(), build_data(_id="b2", userId=None)]})

    builds = api.list_builds()

    assert [b.id for b in builds] == ["b1", "b2"]
    assert builds[1].is_preset
    http.request.assert_called_once_with(
        "GET", "http://backend.test/api/v1/builds", json=None, timeout=(1.0, 1.0)
    )


def test_list_builds_without_builds_key_is_empty(api, http, respond):
    http.request.return_value = respond(200, {})
    assert api.list_builds() == []


def test_base_url_trailing_slash_is_stripped(http):
    client = TacticsApiClient("http://backend.test/", session=http)
    assert client.url("/guides") == "http://backend.test/api/v1/guides"


def test_error_message_comes_from_body(api, http, respond):
    http.request.return_value = respond(400, {"error": "Name already taken"})

    with pytest.raises(ApiError) as exc:
        api.create_build({"name": "x"})

    assert exc.value.message == "Name already taken"
    assert exc.value.status_code == 400


def test_error_without_body_uses_fallback(api, http, respond):
    http.request.return_value = respond(500, invalid_json=True)

    with pytest.raises(ApiError) as exc:
        api.update_guide("g1", {"title": "x"})

    assert exc.value.message == "Failed to update guide"
    assert exc.value.status_code == 500


def test_get_build_not_found(api, http, respond):
    http.request.return_value = respond(404, {})

    with pytest.raises(ApiError) as exc:
        api.get_build("missing")

    assert exc.value.message == "Build not found"
    assert exc.value.not_found


def test_transport_failure_is_single_attempt(api, http):
    http.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(ApiError) as exc:
        api.list_guides()

    assert exc.value.message == "Failed to fetch guides"
    assert exc.value.status_code is None
    assert http.request.call_count == 1


def test_timeout_maps_to_fallback(api, http):
    http.request.side_effect = requests.Timeout()

    with pytest.raises(ApiError) as exc:
        api.list_builds()

    assert exc.value.message == "Failed to fetch builds"


def test_delete_sends_user_id_in_body(api, http, respond):
    http.request.return_value = respond(204, invalid_json=True)

    api.delete_build("b1", "user-1")

    http.request.assert_called_once_with(
        "DELETE", "http://backend.test/api/v1/builds/b1", json={"userId": "user-1"}, timeout=(1.0, 1.0)
    )


def test_user_builds_accepts_bare_list(api, http, respond, build_data):
    http.request.return_value = respond(200, [build_data()])
    assert [b.name for b in api.list_user_builds("user-1")] == ["Bleed Samurai"]
    assert http.request.call_args.args[1].endswith("/builds/user/user-1")


def test_generate_guide_returns_draft(api, http, respond):
    http.request.return_value = respond(200, {"guideData": {"title": "How to bleed"}})

    draft = api.generate_guide("b1", "user-1")

    assert draft == {"title": "How to bleed"}
    method, url = http.request.call_args.args
    assert (method, url) == ("POST", "http://backend.test/api/v1/builds/b1/generate-guide")
    assert http.request.call_args.kwargs["json"] == {"userId": "user-1"}


def test_generate_guide_without_draft_fails(api, http, respond):
    http.request.return_value = respond(200, {"ok": True})

    with pytest.raises(ApiError, match="Failed to generate guide"):
        api.generate_guide("b1", "user-1")


def test_guide_model_normalizes_level(api, http, respond, guide_data):
    http.request.return_value = respond(200, guide_data(recommendedLevel="", tags=["a", "a", "b"]))

    guide = api.get_guide("g1")

    assert guide.recommended_level is None
    assert guide.tags == ["a", "b"]


def test_null_detail_body_is_api_error(api, http, respond):
    http.request.return_value = respond(200, None)

    with pytest.raises(ApiError) as exc:
        api.get_build("b1")

    assert exc.value.message == "Build not found"
    assert exc.value.status_code == 200


def test_mistyped_field_is_api_error(api, http, respond, build_data):
    http.request.return_value = respond(200, {"builds": [build_data(level=None)]})

    with pytest.raises(ApiError, match="Failed to fetch builds"):
        api.list_builds()


def test_user_builds_with_unexpected_shape(api, http, respond):
    http.request.return_value = respond(200, "not a list")

    with pytest.raises(ApiError, match="Failed to fetch your builds"):
        api.list_user_builds("user-1")


def test_created_guide_with_bad_shape(api, http, respond, guide_data):
    http.request.return_value = respond(201, guide_data(isPublic="maybe"))

    with pytest.raises(ApiError) as exc:
        api.create_guide({"title": "x"})

    assert exc.value.message == "Failed to create guide"
    assert exc.value.status_code == 201
