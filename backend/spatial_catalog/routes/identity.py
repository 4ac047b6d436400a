import logging

import requests
from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse, RedirectResponse

from ..services import identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1/orcid-proxy", tags=["identity"])


@router.api_route("/{path:path}", methods=["GET", "POST", "HEAD"])
async def orcid_proxy(path: str, request: Request):
    endpoint = identity.endpoint_for(request.url.path)
    if endpoint is None:
        return PlainTextResponse("Not found", status_code=404)

    if endpoint == "/auth":
        return RedirectResponse(
            identity.build_authorize_url(request.query_params),
            status_code=302,
            headers={"Cache-Control": "no-store"},
        )

    if endpoint not in identity.UPSTREAM_PATHS:
        return PlainTextResponse("Not found", status_code=404)

    body = await request.body()
    try:
        upstream = identity.forward(
            request.method,
            endpoint,
            request.url.query,
            request.headers,
            body,
        )
    except requests.RequestException as exc:
        logger.error("ORCID %s request failed: %s", endpoint, exc)
        return PlainTextResponse(f"Upstream error: {exc}", status_code=502)

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers=identity.relay_headers(upstream.headers),
    )
