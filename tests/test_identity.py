from unittest.mock import Mock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from blood_platform.api.server import create_app
from blood_platform.errors import Unauthenticated
from blood_platform.identity import TokenInfoBridge, TrustingBridge, build_identity_bridge

pytestmark = pytest.mark.unit


def _response(status_code=200, payload=None):
    r = Mock()
    r.status_code = status_code
    r.text = "x" if payload is not None else ""
    r.json.return_value = payload
    return r


def _bridge():
    return TokenInfoBridge(tokeninfo_url="https://idp.test/tokeninfo", audience="client-1", timeout=3)


def test_trusting_bridge_normalizes_email():
    ident = TrustingBridge().verify(email=" Gina@X.com ", display_name=" Gina ", external_id="uid-1")

    assert ident.email == "gina@x.com"
    assert ident.display_name == "Gina"
    assert ident.external_id == "uid-1"


def test_tokeninfo_bridge_uses_token_claims():
    claims = {
        "aud": "client-1",
        "email": "gina@x.com",
        "email_verified": "true",
        "name": "Gina From Google",
        "sub": "google-sub-9",
        "picture": "https://img/g.png",
    }
    with patch("blood_platform.identity.requests.get", return_value=_response(200, claims)) as get:
        ident = _bridge().verify(email="gina@x.com", display_name="G", external_id="ignored", id_token="tok")

    get.assert_called_once()
    assert get.call_args.kwargs["params"] == {"id_token": "tok"}
    assert get.call_args.kwargs["timeout"] == 3
    assert ident.external_id == "google-sub-9"
    assert ident.display_name == "Gina From Google"
    assert ident.avatar == "https://img/g.png"


@pytest.mark.parametrize(
    "status,claims,posted_email",
    [
        (400, {"error": "invalid_token"}, "gina@x.com"),
        (200, {"aud": "someone-else", "email": "gina@x.com", "email_verified": "true"}, "gina@x.com"),
        (200, {"email": "gina@x.com", "email_verified": "true"}, "gina@x.com"),
        (200, {"aud": "client-1", "email": "gina@x.com", "email_verified": "false"}, "gina@x.com"),
        (200, {"aud": "client-1", "email": "gina@x.com", "email_verified": "true"}, "other@x.com"),
    ],
)
def test_tokeninfo_bridge_rejections(status, claims, posted_email):
    with patch("blood_platform.identity.requests.get", return_value=_response(status, claims)):
        with pytest.raises(Unauthenticated):
            _bridge().verify(email=posted_email, display_name="", external_id="x", id_token="tok")


def test_tokeninfo_bridge_requires_token():
    with pytest.raises(Unauthenticated):
        _bridge().verify(email="g@x.com", display_name="", external_id="x")


def test_tokeninfo_bridge_network_error_is_not_an_auth_failure():
    with patch("blood_platform.identity.requests.get", side_effect=requests.ConnectionError("down")):
        with pytest.raises(RuntimeError):
            _bridge().verify(email="g@x.com", display_name="", external_id="x", id_token="tok")


def test_build_identity_bridge_modes():
    assert isinstance(build_identity_bridge(mode="trust", tokeninfo_url="u", audience=None, timeout=1), TrustingBridge)
    assert isinstance(build_identity_bridge(mode="tokeninfo", tokeninfo_url="u", audience="client-1", timeout=1), TokenInfoBridge)
    with pytest.raises(ValueError):
        build_identity_bridge(mode="tokeninfo", tokeninfo_url="u", audience=None, timeout=1)
    with pytest.raises(ValueError):
        build_identity_bridge(mode="tokeninfo", tokeninfo_url="u", audience="  ", timeout=1)
    with pytest.raises(ValueError):
        build_identity_bridge(mode="magic", tokeninfo_url="u", audience=None, timeout=1)


def test_google_login_with_verifying_bridge(cfg):
    bridge = Mock()
    bridge.verify.side_effect = Unauthenticated("Unauthorized: invalid identity token")
    app = create_app(cfg, identity=bridge)

    with TestClient(app) as c:
        r = c.post("/api/auth/google-login", json={"email": "g@x.com", "displayName": "G", "externalId": "x"})

    assert r.status_code == 401
    bridge.verify.assert_called_once()
