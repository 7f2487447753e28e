"""
KVPad Backend — Document Access Handler Unit Tests
===================================================

What:  Every row of the read and write decision tables, without HTTP.

What we test:
    ✅ Table completeness (every reachable key has an action)
    ✅ GET: unprotected, protected without / with valid / with wrong / with malformed credential
    ✅ POST: save (absent and explicit action), set, update, clear, rejected actions
    ✅ Other methods raise MethodNotAllowedError
"""

import pytest

from kvpad.exceptions import MethodNotAllowedError, ValidationError
from kvpad.schemas.document import DocumentForm
from kvpad.services.access_handler import (
    READ_TABLE,
    WRITE_TABLE,
    Action,
    Credential,
    FormAction,
    Protection,
    SecretState,
)
from kvpad.services.credentials import encode_credential


class TestDecisionTables:

    def test_read_table_rows(self):
        assert READ_TABLE == {
            (Protection.UNPROTECTED, Credential.NOT_REQUIRED): Action.RENDER_EDITOR,
            (Protection.PROTECTED, Credential.ABSENT): Action.RENDER_PROMPT,
            (Protection.PROTECTED, Credential.VALID): Action.RENDER_EDITOR,
            (Protection.PROTECTED, Credential.INVALID): Action.REDIRECT_TO_PROMPT,
        }

    def test_write_table_covers_every_form_action(self):
        assert {key[0] for key in WRITE_TABLE} == set(FormAction)
        assert WRITE_TABLE[(FormAction.UPDATE_PASSWORD, SecretState.EMPTY)] is Action.CLEAR_SECRET

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, FormAction.SAVE),
            ("", FormAction.SAVE),
            ("save", FormAction.SAVE),
            ("setPassword", FormAction.SET_PASSWORD),
            ("updatePassword", FormAction.UPDATE_PASSWORD),
            ("dropTable", FormAction.UNKNOWN),
            ("unknown", FormAction.UNKNOWN),
        ],
    )
    def test_form_action_parse(self, raw, expected):
        assert FormAction.parse(raw) is expected


class TestRead:

    @pytest.mark.asyncio
    async def test_unprotected_missing_document_is_empty(self, access_handler):
        outcome = await access_handler.handle("GET", "fresh", "/fresh")

        assert outcome.action is Action.RENDER_EDITOR
        assert outcome.status_code == 200
        assert outcome.content == ""
        assert outcome.protected is False

    @pytest.mark.asyncio
    async def test_unprotected_ignores_credential(self, access_handler, memory_store):
        await memory_store.put("open", "hi")
        outcome = await access_handler.handle("GET", "open", "/open", credential="!!garbage")

        assert outcome.action is Action.RENDER_EDITOR
        assert outcome.content == "hi"

    @pytest.mark.asyncio
    async def test_content_is_unescaped(self, access_handler, memory_store):
        await memory_store.put("doc", "&lt;b&gt; &amp; &#039;x&#039;")
        outcome = await access_handler.read("doc", "/doc")

        assert outcome.content == "<b> & 'x'"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("credential", [None, ""])
    async def test_protected_without_credential_prompts(self, access_handler, guard, memory_store, credential):
        await memory_store.put("foo", "secret text")
        await guard.set_secret("foo", "abc123")

        outcome = await access_handler.handle("GET", "foo", "/foo", credential=credential)

        assert outcome.action is Action.RENDER_PROMPT
        assert outcome.status_code == 200
        assert outcome.content == ""

    @pytest.mark.asyncio
    async def test_protected_with_valid_credential(self, access_handler, guard, memory_store):
        await memory_store.put("foo", "secret text")
        await guard.set_secret("foo", "abc123")

        outcome = await access_handler.handle(
            "GET", "foo", "/foo", credential=encode_credential("abc123")
        )

        assert outcome.action is Action.RENDER_EDITOR
        assert outcome.content == "secret text"
        assert outcome.protected is True

    @pytest.mark.asyncio
    async def test_protected_with_wrong_credential_redirects(self, access_handler, guard, memory_store):
        await memory_store.put("foo", "secret text")
        await guard.set_secret("foo", "abc123")

        outcome = await access_handler.handle(
            "GET", "foo", "/foo", credential=encode_credential("wrong")
        )

        assert outcome.action is Action.REDIRECT_TO_PROMPT
        assert outcome.status_code == 302
        assert outcome.location == "/foo"
        assert outcome.content == ""

    @pytest.mark.asyncio
    async def test_protected_with_malformed_credential_redirects(self, access_handler, guard):
        await guard.set_secret("foo", "abc123")

        outcome = await access_handler.handle("GET", "foo", "/foo", credential="%%%")

        assert outcome.action is Action.REDIRECT_TO_PROMPT
        assert outcome.location == "/foo"


class TestWrite:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", [None, "save"])
    async def test_save_escapes_and_stores(self, access_handler, memory_store, action):
        form = DocumentForm(content="<script>alert('x')</script>", action=action)
        outcome = await access_handler.handle("POST", "doc", "/doc", form=form)

        assert outcome.action is Action.SAVE
        assert outcome.message == "Saved!"
        assert await memory_store.get("doc") == (
            "&lt;script&gt;alert(&#039;x&#039;)&lt;/script&gt;"
        )

    @pytest.mark.asyncio
    async def test_save_then_read_round_trips(self, access_handler):
        text = 'She said "a < b" & left'
        await access_handler.write("doc", DocumentForm(content=text))

        outcome = await access_handler.read("doc", "/doc")
        assert outcome.content == text

    @pytest.mark.asyncio
    async def test_save_without_content_stores_empty(self, access_handler, memory_store):
        await memory_store.put("doc", "old")
        await access_handler.write("doc", DocumentForm())

        assert await memory_store.get("doc") == ""

    @pytest.mark.asyncio
    async def test_save_overwrites(self, access_handler, memory_store):
        await access_handler.write("doc", DocumentForm(content="one"))
        await access_handler.write("doc", DocumentForm(content="two"))

        assert await memory_store.get("doc") == "two"

    @pytest.mark.asyncio
    async def test_save_does_not_touch_password(self, access_handler, guard):
        await guard.set_secret("doc", "pw")
        await access_handler.write("doc", DocumentForm(content="text"))

        assert await guard.verify("doc", "pw") is True

    @pytest.mark.asyncio
    async def test_oversized_content_rejected(self, access_handler, memory_store, monkeypatch):
        from kvpad.config import settings

        monkeypatch.setattr(settings, "max_content_length", 5)
        with pytest.raises(ValidationError, match="too large"):
            await access_handler.write("doc", DocumentForm(content="123456"))
        assert "doc" not in memory_store

    @pytest.mark.asyncio
    async def test_content_limit_counts_utf8_bytes(self, access_handler, memory_store, monkeypatch):
        from kvpad.config import settings

        monkeypatch.setattr(settings, "max_content_length", 5)
        # 3 characters, 6 bytes
        with pytest.raises(ValidationError) as excinfo:
            await access_handler.write("doc", DocumentForm(content="äöü"))
        assert excinfo.value.context["size"] == 6

        await access_handler.write("doc", DocumentForm(content="äb"))
        assert await memory_store.get("doc") == "äb"

    @pytest.mark.asyncio
    async def test_set_password(self, access_handler, guard):
        form = DocumentForm(action="setPassword", new_password="abc123")
        outcome = await access_handler.handle("POST", "foo", "/foo", form=form)

        assert outcome.action is Action.SET_SECRET
        assert outcome.message == "Password set!"
        assert outcome.protected is True
        assert await guard.verify("foo", "abc123") is True

    @pytest.mark.asyncio
    async def test_update_password(self, access_handler, guard):
        await guard.set_secret("foo", "old")
        form = DocumentForm(action="updatePassword", new_password="new")
        outcome = await access_handler.write("foo", form)

        assert outcome.message == "Password updated!"
        assert await guard.verify("foo", "new") is True
        assert await guard.verify("foo", "old") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("new_password", [None, ""])
    async def test_update_with_empty_secret_clears(self, access_handler, guard, new_password):
        await guard.set_secret("foo", "old")
        form = DocumentForm(action="updatePassword", new_password=new_password)
        outcome = await access_handler.write("foo", form)

        assert outcome.action is Action.CLEAR_SECRET
        assert outcome.message == "Password removed!"
        assert outcome.protected is False
        assert await guard.is_protected("foo") is False

    @pytest.mark.asyncio
    async def test_set_password_with_empty_secret_rejected(self, access_handler, guard):
        with pytest.raises(ValidationError, match="password is required"):
            await access_handler.write("foo", DocumentForm(action="setPassword", new_password=""))
        assert await guard.is_protected("foo") is False

    @pytest.mark.asyncio
    async def test_unknown_action_rejected(self, access_handler, memory_store):
        with pytest.raises(ValidationError, match="Unsupported action") as excinfo:
            await access_handler.write("foo", DocumentForm(action="purge", content="x"))
        assert excinfo.value.field == "action"
        assert len(memory_store) == 0


class TestMethodDispatch:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE", "OPTIONS"])
    async def test_other_methods_not_allowed(self, access_handler, method):
        with pytest.raises(MethodNotAllowedError) as excinfo:
            await access_handler.handle(method, "doc", "/doc")
        assert excinfo.value.method == method

    @pytest.mark.asyncio
    async def test_method_is_case_insensitive(self, access_handler):
        outcome = await access_handler.handle("get", "doc", "/doc")
        assert outcome.action is Action.RENDER_EDITOR
