from unittest.mock import Mock

import pytest
import requests

from app.models.user import SessionUser
from app.services.api_client import ApiError
from app.services.auth_session import AuthSession
from app.services.identity_provider import (
    CredentialResponse,
    GoogleIdentityProvider,
    IdentityProviderError,
    ProviderConfig,
)


def test_starts_loading_and_signed_out(auth):
    assert auth.loading is True
    assert auth.is_initialized is False
    assert auth.is_authenticated is False
    assert auth.user_id is None


def test_initialize_configures_provider(auth, provider):
    auth.initialize()

    assert provider.config.client_id == "client-123"
    assert provider.config.auto_select is False
    assert provider.config.cancel_on_tap_outside is True
    assert auth.is_initialized and not auth.loading


def test_initialize_failure_is_swallowed(storage, api, make_provider):
    session = AuthSession(make_provider(fail_init=True), storage, api, client_id="client-123")

    session.initialize()

    assert session.is_initialized is True
    assert session.loading is False
    assert session.is_authenticated is False


def test_sign_in_before_provider_loaded_does_not_raise(auth, provider):
    auth.sign_in()
    assert provider.prompts == 0

    auth.initialize()
    auth.sign_in()
    assert provider.prompts == 1


def test_credential_response_persists_user(auth, storage, http, respond, token):
    http.request.return_value = respond(200, {"ok": True})
    credential = token()

    user = auth.handle_credential_response(CredentialResponse(credential=credential))

    assert user.id == "google-42"
    assert user.name == "Melina"
    assert auth.is_authenticated
    saved = SessionUser.model_validate_json(storage.get_item(auth.storage_key))
    assert saved.token == credential
    http.request.assert_called_once()
    assert http.request.call_args.kwargs["json"] == {
        "googleId": "google-42",
        "name": "Melina",
        "email": "melina@example.com",
        "picture": "https://example.com/melina.png",
    }


def test_backend_registration_failure_keeps_user(auth, http, respond, token):
    http.request.return_value = respond(500, {"error": "db down"})

    user = auth.handle_credential_response(CredentialResponse(credential=token()))

    assert user is not None
    assert auth.is_authenticated


def test_malformed_credential_is_rejected(auth, http):
    assert auth.handle_credential_response(CredentialResponse(credential="not-a-jwt")) is None
    assert not auth.is_authenticated
    http.request.assert_not_called()


def test_credential_without_subject_is_rejected(auth, token):
    payload_less = token(sub=None)
    assert auth.handle_credential_response(CredentialResponse(credential=payload_less)) is None


def test_session_restored_from_storage(storage, api, make_provider):
    storage.set_item("tarnished_tactics_user", SessionUser(id="u9", name="Ranni").model_dump_json())

    session = AuthSession(make_provider(), storage, api, client_id="x")

    assert session.user_id == "u9"
    assert session.is_authenticated


def test_corrupt_saved_user_is_discarded(storage, api, make_provider):
    storage.set_item("tarnished_tactics_user", '{"name": "no id"}')

    session = AuthSession(make_provider(), storage, api, client_id="x")

    assert session.user is None
    assert storage.get_item("tarnished_tactics_user") is None


def test_sign_out_clears_memory_and_storage(auth, provider, storage, token, http, respond):
    http.request.return_value = respond(200, {})
    auth.handle_credential_response(CredentialResponse(credential=token()))

    auth.sign_out()

    assert auth.user is None
    assert storage.get_item(auth.storage_key) is None
    assert provider.disabled == 1


def test_sign_out_provider_failure_propagates(signed_in, provider):
    provider.fail_disable = True

    with pytest.raises(IdentityProviderError):
        signed_in.sign_out()

    assert signed_in.is_authenticated


def test_snapshot_hides_token(signed_in):
    signed_in.user.token = "secret"
    snap = signed_in.snapshot()
    assert snap["is_authenticated"] is True
    assert "token" not in snap["user"]


def test_google_provider_requires_client_id():
    provider = GoogleIdentityProvider("https://gsi.test/client", session=Mock())
    with pytest.raises(IdentityProviderError, match="Missing Google client id"):
        provider.initialize(ProviderConfig(client_id=" ", callback=lambda r: None))


def test_google_provider_script_unreachable():
    http = Mock()
    http.get.side_effect = requests.ConnectionError()
    provider = GoogleIdentityProvider("https://gsi.test/client", session=http)

    with pytest.raises(IdentityProviderError):
        provider.initialize(ProviderConfig(client_id="abc", callback=lambda r: None))
    with pytest.raises(IdentityProviderError, match="not loaded"):
        provider.prompt()


def test_google_provider_ready():
    http = Mock()
    provider = GoogleIdentityProvider("https://gsi.test/client", session=http)

    provider.initialize(ProviderConfig(client_id="abc", callback=lambda r: None))
    provider.prompt()

    assert provider.loaded and provider.prompt_pending
    assert provider.config.client_id == "abc"
    provider.disable_auto_select()
    assert provider.prompt_pending is False


def test_api_error_is_runtime_error():
    assert issubclass(ApiError, RuntimeError)
