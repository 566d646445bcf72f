from __future__ import annotations

from unittest.mock import Mock

import jwt
import pytest

from app.models.user import SessionUser
from app.services.api_client import TacticsApiClient
from app.services.auth_session import AuthSession
from app.services.identity_provider import IdentityProvider, IdentityProviderError
from app.services.local_storage import LocalStorage

BASE_URL = "http://backend.test"
SIGNING_KEY = "test-signing-key-that-is-long-enough-for-hs256"


def make_response(status: int = 200, body=None, *, invalid_json: bool = False) -> Mock:
    """Réponse `requests` minimale (status_code / ok / json())."""
    response = Mock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if invalid_json:
        response.json.side_effect = ValueError("no JSON body")
    else:
        response.json.return_value = body
    return response


def make_token(**claims) -> str:
    payload = {
        "sub": "google-42",
        "name": "Melina",
        "email": "melina@example.com",
        "picture": "https://example.com/melina.png",
    }
    payload.update(claims)
    payload = {key: value for key, value in payload.items() if value is not None}
    return jwt.encode(payload, SIGNING_KEY, algorithm="HS256")


def build_payload(**overrides) -> dict:
    data = {
        "_id": "b1",
        "userId": "user-1",
        "name": "Bleed Samurai",
        "description": "Uchigatana + bleed",
        "class": "Samurai",
        "level": 81,
        "stats": {
            "vigor": 40, "mind": 15, "endurance": 20, "strength": 12,
            "dexterity": 40, "intelligence": 9, "faith": 8, "arcane": 45,
        },
        "equipment": {
            "rightHand": ["Uchigatana"],
            "leftHand": ["Brass Shield"],
            "armor": {"helmet": "", "chest": "Ronin's Armor", "gauntlets": "", "legs": ""},
            "talismans": ["Lord of Blood's Exultation"],
        },
        "spells": [],
        "tags": ["bleed", "pvp"],
        "isPublic": True,
    }
    data.update(overrides)
    return data


def guide_payload(**overrides) -> dict:
    data = {
        "_id": "g1",
        "authorId": "user-1",
        "title": "Beating Malenia",
        "description": "Waterfowl dodge",
        "content": "Run away, then jump.",
        "category": "Boss Guide",
        "difficulty": "Hard",
        "recommendedLevel": 120,
        "associatedBuilds": ["b1"],
        "tags": ["boss"],
        "images": [],
        "isPublic": True,
    }
    data.update(overrides)
    return data


class FakeProvider(IdentityProvider):
    def __init__(self, *, fail_init: bool = False, fail_disable: bool = False) -> None:
        self.fail_init = fail_init
        self.fail_disable = fail_disable
        self.config = None
        self.prompts = 0
        self.disabled = 0

    def initialize(self, config) -> None:
        if self.fail_init:
            raise IdentityProviderError("script blocked")
        self.config = config

    def prompt(self) -> None:
        if self.config is None:
            raise IdentityProviderError("Google Identity Services not loaded")
        self.prompts += 1

    def disable_auto_select(self) -> None:
        if self.fail_disable:
            raise IdentityProviderError("cleanup failed")
        self.disabled += 1


@pytest.fixture
def http():
    session = Mock()
    session.request.return_value = make_response(200, {})
    return session


@pytest.fixture
def api(http):
    return TacticsApiClient(BASE_URL, session=http, timeout=(1.0, 1.0))


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(path=tmp_path / "local_storage.json")


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def auth(provider, storage, api):
    return AuthSession(provider, storage, api, client_id="client-123")


@pytest.fixture
def signed_in(auth):
    auth.user = SessionUser(id="user-1", name="Tarnished", email="tarnished@example.com")
    return auth


@pytest.fixture
def respond():
    return make_response


@pytest.fixture
def token():
    return make_token


@pytest.fixture
def build_data():
    return build_payload


@pytest.fixture
def guide_data():
    return guide_payload


@pytest.fixture
def make_provider():
    return FakeProvider
