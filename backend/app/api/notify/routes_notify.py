"""Payment notification routes."""
import logging

from fastapi import APIRouter, Depends, Request

from app.api.deps import (
    get_event_ingestor,
    get_request_authenticator,
    get_security_headers,
    get_settings,
)
from app.domain.common.errors import InvalidInputError
from app.domain.payments.services import EventIngestor, parse_payload
from app.domain.security.authenticator import RequestAuthenticator, SecurityHeaders
from app.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_body_capped(request: Request, limit: int) -> bytes:
    """Read the request body, stopping as soon as it passes limit bytes."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise InvalidInputError("Request body too large")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise InvalidInputError("Request body too large")
    return bytes(body)


@router.post("/notify")
async def notify(
    request: Request,
    headers: SecurityHeaders = Depends(get_security_headers),
    authenticator: RequestAuthenticator = Depends(get_request_authenticator),
    ingestor: EventIngestor = Depends(get_event_ingestor),
    settings: Settings = Depends(get_settings),
):
    """Record a signed payment notification exactly once per client_txn_id.

    The signature covers the raw body bytes, so the body is read as bytes and
    only parsed after authentication.
    """
    raw_body = await read_body_capped(request, settings.max_body_bytes)

    device = await authenticator.authenticate(headers, raw_body)
    payload = parse_payload(raw_body)
    result = await ingestor.ingest(device, payload)
    return result.model_dump(mode="json", exclude_none=True)
