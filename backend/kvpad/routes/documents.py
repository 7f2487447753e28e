"""
KVPad Backend — Document Route Handlers
========================================

What:  Serves GET/POST on /<name> and rejects other methods with 405.
How:   Builds the document name and credential from the URL, the form from the
       body, lets DocumentAccessHandler decide, and renders its AccessOutcome.

Caching Strategy:
    Views are never cached (no-store): the same URL shows different content
    after every save, and a cached editor page would leak protected text.
"""

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from kvpad.config import settings
from kvpad.schemas.document import DocumentForm
from kvpad.services.access_handler import AccessOutcome, Action, DocumentAccessHandler
from kvpad.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Documents"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


def get_store(request: Request) -> KeyValueStore:
    """The store built by create_app(), shared by every request."""
    return request.app.state.store


def get_access_handler(store: KeyValueStore = Depends(get_store)) -> DocumentAccessHandler:
    return DocumentAccessHandler(store)


def _canonical_path(request: Request) -> str:
    """Request path re-encoded from the decoded name, so `?` and `#` in a name survive the redirect."""
    return quote(request.scope["path"])


async def _read_form(request: Request) -> DocumentForm:
    form = await request.form()
    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    return DocumentForm.model_validate(fields)


def _render(request: Request, outcome: AccessOutcome) -> Response:
    if outcome.action is Action.RENDER_EDITOR:
        return templates.TemplateResponse(
            request,
            "editor.html",
            {
                "name": outcome.name,
                "content": outcome.content,
                "is_protected": outcome.protected,
                "credential_param": settings.credential_param,
            },
            headers=NO_CACHE_HEADERS,
        )
    if outcome.action is Action.RENDER_PROMPT:
        return templates.TemplateResponse(
            request,
            "prompt.html",
            {"name": outcome.name, "credential_param": settings.credential_param},
            headers=NO_CACHE_HEADERS,
        )
    if outcome.action is Action.REDIRECT_TO_PROMPT:
        return RedirectResponse(url=outcome.location, status_code=302, headers=NO_CACHE_HEADERS)
    return PlainTextResponse(outcome.message, status_code=outcome.status_code)


@router.api_route(
    "/{name:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    summary="Read or write a named document",
    description=(
        "GET renders the editor (or the password prompt for protected documents). "
        "POST saves text or manages the document password. Other methods return 405."
    ),
    response_class=Response,
)
async def document(
    request: Request,
    name: str,
    handler: DocumentAccessHandler = Depends(get_access_handler),
) -> Response:
    """
    Single entry point for /<name>.

    Name: the path without its leading "/"; "/" maps to DEFAULT_DOCUMENT_NAME.
    Credential: the `q` query parameter (padding-stripped base64 of the password).
    """
    name = name or settings.default_document_name
    form = await _read_form(request) if request.method == "POST" else None

    outcome = await handler.handle(
        method=request.method,
        name=name,
        canonical_path=_canonical_path(request),
        credential=request.query_params.get(settings.credential_param),
        form=form,
    )
    return _render(request, outcome)
