"""ORCID OpenID Connect relay helpers."""

# purpose: translate Keycloak-style OIDC paths into ORCID endpoints and forward calls
# status: active

from __future__ import annotations

import os
from typing import Mapping, Optional
from urllib.parse import urlencode

import requests

MARKER = "/realms/orcid/protocol/openid-connect"
UPSTREAM_PATHS = {
    "/token": "/oauth/token",
    "/userinfo": "/oauth/userinfo",
}

# hop-by-hop and transport headers that must not be replayed
_REQUEST_SKIP = {"host", "content-length", "connection", "transfer-encoding", "accept-encoding"}
_RESPONSE_SKIP = {"content-length", "content-encoding", "transfer-encoding", "connection"}

TIMEOUT = 10


def orcid_base() -> str:
    return os.getenv("ORCID_BASE", "https://orcid.org").rstrip("/")


def endpoint_for(path: str) -> Optional[str]:
    """Return the suffix after the OIDC marker, or None when the marker is absent."""

    idx = path.find(MARKER)
    if idx == -1:
        return None
    return path[idx + len(MARKER):]


def build_authorize_url(params: Mapping[str, str]) -> str:
    """Authorize URL keeping only the parameters ORCID accepts.

    The scope is always ``openid``; ``state`` is forwarded only when set.
    """

    query = {
        "client_id": params.get("client_id") or "",
        "redirect_uri": params.get("redirect_uri") or "",
        "response_type": params.get("response_type") or "code",
        "scope": "openid",
    }
    state = params.get("state")
    if state:
        query["state"] = state
    return f"{orcid_base()}/oauth/authorize?{urlencode(query)}"


def forward_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in _REQUEST_SKIP}


def relay_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in _RESPONSE_SKIP}


def forward(
    method: str,
    endpoint: str,
    query: str,
    headers: Mapping[str, str],
    body: Optional[bytes],
) -> requests.Response:
    url = orcid_base() + UPSTREAM_PATHS[endpoint]
    if query:
        url = f"{url}?{query}"
    return requests.request(
        method,
        url,
        headers=forward_headers(headers),
        data=None if method in {"GET", "HEAD"} else body,
        allow_redirects=True,
        timeout=TIMEOUT,
    )
