"""
KVPad Backend — Document Access Handler
========================================

What:  Decides what every request to /<name> does and performs the store side effect.
Why:   The interesting behaviour of the whole service is the password-gated
       read/write flow; keeping it out of the route makes every transition
       testable without HTTP.
How:   Requests are classified into enum keys and looked up in two explicit
       decision tables. The chosen Action is then executed against the injected
       store. The route turns the resulting AccessOutcome into an HTTP response.

Read table (GET):
    ┌─────────────┬──────────────┬───────────────────────────┐
    │ Protection  │ Credential   │ Action                    │
    ├─────────────┼──────────────┼───────────────────────────┤
    │ UNPROTECTED │ NOT_REQUIRED │ RENDER_EDITOR             │
    │ PROTECTED   │ ABSENT       │ RENDER_PROMPT             │
    │ PROTECTED   │ VALID        │ RENDER_EDITOR             │
    │ PROTECTED   │ INVALID      │ REDIRECT_TO_PROMPT (302)  │
    └─────────────┴──────────────┴───────────────────────────┘

Write table (POST):
    ┌─────────────────┬──────────────┬───────────────┐
    │ Form action     │ New secret   │ Action        │
    ├─────────────────┼──────────────┼───────────────┤
    │ SAVE            │ NOT_USED     │ SAVE          │
    │ SET_PASSWORD    │ GIVEN        │ SET_SECRET    │
    │ SET_PASSWORD    │ EMPTY        │ REJECT        │
    │ UPDATE_PASSWORD │ GIVEN        │ SET_SECRET    │
    │ UPDATE_PASSWORD │ EMPTY        │ CLEAR_SECRET  │
    │ UNKNOWN         │ NOT_USED     │ REJECT        │
    └─────────────────┴──────────────┴───────────────┘

Any other method raises MethodNotAllowedError (405).

Writes are not gated by the password: only reads consult the guard.
Each request touches at most one key; there is no cross-key atomicity.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from kvpad.config import settings
from kvpad.exceptions import (
    CredentialDecodeError,
    MethodNotAllowedError,
    ValidationError,
)
from kvpad.schemas.document import DocumentForm
from kvpad.services.credentials import decode_credential
from kvpad.services.escaping import escape_html, unescape_html
from kvpad.services.password_guard import PasswordGuard
from kvpad.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class Protection(enum.Enum):
    UNPROTECTED = "unprotected"
    PROTECTED = "protected"


class Credential(enum.Enum):
    NOT_REQUIRED = "not_required"
    ABSENT = "absent"
    VALID = "valid"
    INVALID = "invalid"


class FormAction(enum.Enum):
    SAVE = "save"
    SET_PASSWORD = "setPassword"
    UPDATE_PASSWORD = "updatePassword"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "FormAction":
        """None or "" means save; unrecognised values map to UNKNOWN."""
        if not raw:
            return cls.SAVE
        for member in cls:
            if member is not cls.UNKNOWN and member.value == raw:
                return member
        return cls.UNKNOWN


class SecretState(enum.Enum):
    NOT_USED = "not_used"
    GIVEN = "given"
    EMPTY = "empty"


class Action(enum.Enum):
    RENDER_EDITOR = "render_editor"
    RENDER_PROMPT = "render_prompt"
    REDIRECT_TO_PROMPT = "redirect_to_prompt"
    SAVE = "save"
    SET_SECRET = "set_secret"
    CLEAR_SECRET = "clear_secret"
    REJECT = "reject"


READ_TABLE: Dict[Tuple[Protection, Credential], Action] = {
    (Protection.UNPROTECTED, Credential.NOT_REQUIRED): Action.RENDER_EDITOR,
    (Protection.PROTECTED, Credential.ABSENT): Action.RENDER_PROMPT,
    (Protection.PROTECTED, Credential.VALID): Action.RENDER_EDITOR,
    (Protection.PROTECTED, Credential.INVALID): Action.REDIRECT_TO_PROMPT,
}

WRITE_TABLE: Dict[Tuple[FormAction, SecretState], Action] = {
    (FormAction.SAVE, SecretState.NOT_USED): Action.SAVE,
    (FormAction.SET_PASSWORD, SecretState.GIVEN): Action.SET_SECRET,
    (FormAction.SET_PASSWORD, SecretState.EMPTY): Action.REJECT,
    (FormAction.UPDATE_PASSWORD, SecretState.GIVEN): Action.SET_SECRET,
    (FormAction.UPDATE_PASSWORD, SecretState.EMPTY): Action.CLEAR_SECRET,
    (FormAction.UNKNOWN, SecretState.NOT_USED): Action.REJECT,
}

# Plain-text bodies returned to the browser's fetch() call
SUCCESS_MESSAGES = {
    (Action.SAVE, FormAction.SAVE): "Saved!",
    (Action.SET_SECRET, FormAction.SET_PASSWORD): "Password set!",
    (Action.SET_SECRET, FormAction.UPDATE_PASSWORD): "Password updated!",
    (Action.CLEAR_SECRET, FormAction.UPDATE_PASSWORD): "Password removed!",
}


@dataclass(frozen=True)
class AccessOutcome:
    """
    Result of one request, independent of HTTP response classes.

    Attributes:
        action: The decision-table action that was executed
        status_code: HTTP status the route should use
        name: Document name
        content: Decoded document text (RENDER_EDITOR only)
        protected: Password state after the request (reads and secret changes)
        location: Redirect target (REDIRECT_TO_PROMPT only)
        message: Plain-text body for write actions
    """
    action: Action
    status_code: int
    name: str
    content: str = ""
    protected: bool = False
    location: Optional[str] = None
    message: str = ""


def decide_read(protection: Protection, credential: Credential) -> Action:
    return READ_TABLE[(protection, credential)]


def decide_write(form_action: FormAction, secret: SecretState) -> Action:
    return WRITE_TABLE[(form_action, secret)]


class DocumentAccessHandler:
    """
    Serves reads and accepts writes for named documents.

    Stateless apart from the injected store; one instance per request is fine.
    """

    def __init__(self, store: KeyValueStore, guard: Optional[PasswordGuard] = None):
        self.store = store
        self.guard = guard or PasswordGuard(store)

    async def handle(
        self,
        method: str,
        name: str,
        canonical_path: str,
        credential: Optional[str] = None,
        form: Optional[DocumentForm] = None,
    ) -> AccessOutcome:
        """
        Dispatch on HTTP method.

        Raises:
            MethodNotAllowedError: for anything other than GET and POST
            ValidationError: for rejected write actions
        """
        method = method.upper()
        if method == "GET":
            return await self.read(name, canonical_path, credential)
        if method == "POST":
            return await self.write(name, form or DocumentForm())
        logger.info("Rejected %s on document %r", method, name)
        raise MethodNotAllowedError(method=method, context={"document": name})

    # ── Reads ─────────────────────────────────────────────────────────────

    async def read(
        self, name: str, canonical_path: str, credential: Optional[str] = None
    ) -> AccessOutcome:
        protection = (
            Protection.PROTECTED
            if await self.guard.is_protected(name)
            else Protection.UNPROTECTED
        )
        cred_state = await self._classify_credential(name, protection, credential)
        action = decide_read(protection, cred_state)
        protected = protection is Protection.PROTECTED

        if action is Action.RENDER_EDITOR:
            stored = await self.store.get(name)
            return AccessOutcome(
                action=action,
                status_code=200,
                name=name,
                content=unescape_html(stored),
                protected=protected,
            )

        if action is Action.RENDER_PROMPT:
            return AccessOutcome(action=action, status_code=200, name=name, protected=True)

        logger.info("Bad credential for document %r, redirecting to prompt", name)
        return AccessOutcome(
            action=action,
            status_code=302,
            name=name,
            protected=True,
            location=canonical_path,
        )

    async def _classify_credential(
        self, name: str, protection: Protection, credential: Optional[str]
    ) -> Credential:
        if protection is Protection.UNPROTECTED:
            return Credential.NOT_REQUIRED
        if not credential:
            return Credential.ABSENT
        try:
            secret = decode_credential(credential)
        except CredentialDecodeError:
            return Credential.INVALID
        if await self.guard.verify(name, secret):
            return Credential.VALID
        return Credential.INVALID

    # ── Writes ────────────────────────────────────────────────────────────

    async def write(self, name: str, form: DocumentForm) -> AccessOutcome:
        form_action = FormAction.parse(form.action)
        if form_action in (FormAction.SET_PASSWORD, FormAction.UPDATE_PASSWORD):
            secret_state = SecretState.GIVEN if form.new_password else SecretState.EMPTY
        else:
            secret_state = SecretState.NOT_USED

        action = decide_write(form_action, secret_state)

        if action is Action.REJECT:
            if form_action is FormAction.UNKNOWN:
                raise ValidationError(
                    message=f"Unsupported action '{form.action}'",
                    field="action",
                    context={"allowed": [a.value for a in FormAction if a is not FormAction.UNKNOWN]},
                )
            raise ValidationError(message="A new password is required", field="newPassword")

        if action is Action.SAVE:
            content = form.content or ""
            size = len(content.encode("utf-8"))
            if size > settings.max_content_length:
                raise ValidationError(
                    message="Note is too large to save",
                    field="content",
                    context={"max_bytes": settings.max_content_length, "size": size},
                )
            await self.store.put(name, escape_html(content))
            logger.info("Saved document %r (%d bytes)", name, size)
        elif action is Action.SET_SECRET:
            await self.guard.set_secret(name, form.new_password)
        else:
            await self.guard.clear_secret(name)

        return AccessOutcome(
            action=action,
            status_code=200,
            name=name,
            protected=action is Action.SET_SECRET,
            message=SUCCESS_MESSAGES[(action, form_action)],
        )
