"""Rotas do vínculo de conta Google (link enviado pelo WhatsApp)."""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import HTMLResponse, RedirectResponse

from pennyworth.api.dependencies import get_account_linking
from pennyworth.application.account_linking import (
    AccountLinkingService,
    InvalidChannelError,
    UnknownLinkError,
)
from pennyworth.domain.errors import OAuthError
from pennyworth.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth")


def _page(title: str, lines: list[str], status_code: int = 200) -> HTMLResponse:
    body = "".join(f"<p>{escape(line)}</p>" for line in lines)
    return HTMLResponse(
        content=(
            f"<html><head><title>{escape(title)}</title></head>"
            '<body style="font-family: Arial; text-align: center; padding: 2rem;">'
            f"<h1>{escape(title)}</h1>{body}</body></html>"
        ),
        status_code=status_code,
    )


@router.get("")
def start_login(
    whatsapp: str = Query(..., description="Número WhatsApp em E.164"),
    linking: AccountLinkingService = Depends(get_account_linking),
) -> Response:
    try:
        consent_url = linking.start(whatsapp)
    except InvalidChannelError:
        return _page(
            "Invalid number",
            ["Invalid WhatsApp number format. Use E.164 format like +1234567890."],
            status_code=400,
        )
    return RedirectResponse(consent_url, status_code=307)


@router.get("/callback")
async def login_callback(
    code: str = Query(...),
    state: str = Query(...),
    linking: AccountLinkingService = Depends(get_account_linking),
) -> HTMLResponse:
    try:
        await linking.complete(code, state)
    except UnknownLinkError:
        return _page(
            "Link expired",
            ["This login link is invalid or has expired.", 'Say "Hi" on WhatsApp to get a new one.'],
            status_code=400,
        )
    except OAuthError as exc:
        logger.warning("account_link_failed", extra={"error_type": type(exc).__name__})
        return _page("Authentication failed", ["Please try again in a moment."], status_code=502)

    return _page(
        "✅ Auth Complete",
        ["You can now return to WhatsApp and continue using Alfred.", "This tab can be closed."],
    )
