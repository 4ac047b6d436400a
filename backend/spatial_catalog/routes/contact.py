import json
import os
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from .. import notify
from ..auth import decode_access_token

limiter = Limiter(key_func=get_remote_address)
testing = os.getenv("TESTING") == "1"


def rate_limit(limit: str):
    if testing:
        def wrapper(func):
            return func
        return wrapper
    return limiter.limit(limit)


router = APIRouter(prefix="/functions/v1/send-contact-email", tags=["contact"])

SUBJECT_LIMIT = 200
MESSAGE_LIMIT = 6000


def _cors_headers(request: Request) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": request.headers.get("origin") or "*",
        "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }


def _error(request: Request, status: int, body: dict[str, Any]) -> JSONResponse:
    return JSONResponse(body, status_code=status, headers=_cors_headers(request))


async def _read_json(request: Request) -> dict[str, Any]:
    try:
        data = json.loads(await request.body() or b"{}")
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


@router.api_route("", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
@rate_limit("5/minute")
async def send_contact_email(request: Request):
    if request.method == "OPTIONS":
        return PlainTextResponse("ok", headers=_cors_headers(request))
    if request.method != "POST":
        return _error(request, 405, {"error": "Method not allowed"})

    auth_header = request.headers.get("authorization") or ""
    if not auth_header.lower().startswith("bearer "):
        return _error(request, 401, {"error": "Missing authorization header"})
    if decode_access_token(auth_header[7:].strip()) is None:
        return _error(request, 401, {"error": "Invalid authorization token"})

    data = await _read_json(request)
    subject = _text(data.get("subject"))
    message = _text(data.get("message"))
    if not subject or not message:
        return _error(request, 400, {"error": "Missing subject/message"})

    sender = _text(data.get("senderEmail")) or None
    try:
        notify.send_transactional_email(
            subject[:SUBJECT_LIMIT], message[:MESSAGE_LIMIT], sender
        )
    except notify.EmailProviderError as exc:
        return _error(request, 500, {"error": "Email provider error", "details": exc.details})
    return JSONResponse({"ok": True}, headers=_cors_headers(request))
