"""Social-login identity bridge.

The core only ever consumes a verified (email, display_name, external_id) tuple.
How that tuple is verified is up to the bridge:

- TrustingBridge: the frontend SDK already signed the user in with the provider and
  posts the resulting profile; the backend accepts it as-is.
- TokenInfoBridge: the frontend also posts the provider ID token, which is checked
  against the provider's tokeninfo endpoint before any claim is trusted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests

from blood_platform.errors import Unauthenticated


def _debug(msg: str) -> None:
    print(f"[idp] {msg}")


@dataclass(frozen=True)
class FederatedIdentity:
    email: str
    display_name: str
    external_id: str
    avatar: str = ""


class IdentityBridge(Protocol):
    def verify(
        self,
        *,
        email: str,
        display_name: str,
        external_id: str,
        avatar: str = "",
        id_token: Optional[str] = None,
    ) -> FederatedIdentity: ...


class TrustingBridge:
    """Accept the posted profile without contacting the provider."""

    def verify(
        self,
        *,
        email: str,
        display_name: str,
        external_id: str,
        avatar: str = "",
        id_token: Optional[str] = None,
    ) -> FederatedIdentity:
        return FederatedIdentity(
            email=(email or "").strip().lower(),
            display_name=(display_name or "").strip(),
            external_id=(external_id or "").strip(),
            avatar=(avatar or "").strip(),
        )


class TokenInfoBridge:
    """Verify an ID token via an OAuth2 tokeninfo endpoint (Google-compatible)."""

    def __init__(self, *, tokeninfo_url: str, audience: str, timeout: float = 10.0):
        # Without an audience, a token minted for any other client would pass.
        if not (audience or "").strip():
            raise ValueError("IDP_AUDIENCE is required when IDP_MODE=tokeninfo")
        self.tokeninfo_url = tokeninfo_url
        self.audience = audience.strip()
        self.timeout = timeout

    def _fetch_claims(self, id_token: str) -> Dict[str, Any]:
        try:
            r = requests.get(self.tokeninfo_url, params={"id_token": id_token}, timeout=self.timeout)
        except requests.RequestException as e:
            _debug(f"tokeninfo request failed: {e}")
            raise RuntimeError(f"identity_provider_unreachable: {e}") from e
        if r.status_code != 200:
            _debug(f"tokeninfo rejected token: status={r.status_code}")
            raise Unauthenticated("Unauthorized: invalid identity token")
        claims = r.json() if r.text else {}
        if not isinstance(claims, dict):
            raise Unauthenticated("Unauthorized: invalid identity token")
        return claims

    def verify(
        self,
        *,
        email: str,
        display_name: str,
        external_id: str,
        avatar: str = "",
        id_token: Optional[str] = None,
    ) -> FederatedIdentity:
        if not id_token:
            raise Unauthenticated("Unauthorized: identity token missing")

        claims = self._fetch_claims(id_token)

        if str(claims.get("aud") or "") != self.audience:
            raise Unauthenticated("Unauthorized: identity token audience mismatch")

        verified = str(claims.get("email_verified", "")).lower() in ("true", "1")
        token_email = str(claims.get("email") or "").strip().lower()
        if not token_email or not verified:
            raise Unauthenticated("Unauthorized: identity email not verified")
        # Posted fields are only hints; the token wins.
        if email and email.strip().lower() != token_email:
            raise Unauthenticated("Unauthorized: identity email mismatch")

        return FederatedIdentity(
            email=token_email,
            display_name=str(claims.get("name") or display_name or "").strip(),
            external_id=str(claims.get("sub") or external_id or "").strip(),
            avatar=str(claims.get("picture") or avatar or "").strip(),
        )


def build_identity_bridge(*, mode: str, tokeninfo_url: str, audience: str | None, timeout: float) -> IdentityBridge:
    m = (mode or "trust").strip().lower()
    if m == "tokeninfo":
        return TokenInfoBridge(tokeninfo_url=tokeninfo_url, audience=audience or "", timeout=timeout)
    if m != "trust":
        raise ValueError(f"invalid IDP_MODE: {mode}")
    return TrustingBridge()
