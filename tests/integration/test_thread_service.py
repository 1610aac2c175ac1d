"""
Integration tests for ThreadService against an in-memory database.

System role: Verification of thread/message mutations, ordering and auth
"""

import pytest
from sqlalchemy import func, select

from threaded.application.services.session_service import SessionService
from threaded.application.services.thread_service import ThreadService
from threaded.boundary.db.CRUD import message_crud
from threaded.boundary.db.models import MessageModel, ThreadModel
from threaded.core.exceptions import (
    ForbiddenError,
    MessageNotFoundError,
    ThreadNotFoundError,
    ValidationError,
)


@pytest.fixture
async def owned_session(test_async_db, clock) -> dict:
    """A session plus its owner token."""
    return await SessionService(test_async_db, clock=clock).create_session("# Doc")


@pytest.fixture
def threads(test_async_db, clock) -> ThreadService:
    return ThreadService(test_async_db, clock=clock)


@pytest.fixture
def sessions(test_async_db, clock) -> SessionService:
    return SessionService(test_async_db, clock=clock)


class TestAddThreadAndMessages:

    @pytest.mark.asyncio
    async def test_document_discussion_scenario(self, owned_session, threads, sessions, clock) -> None:
        # Arrange
        sid, token = owned_session["session_id"], owned_session["owner_token"]

        # Act
        thread = await threads.add_thread(sid, token, "Doc", "Doc")
        clock.advance(10)
        await threads.add_message(sid, thread["thread_id"], token, "user", "explain")
        clock.advance(10)
        await threads.add_message(sid, thread["thread_id"], token, "model", "it says doc")

        # Assert
        session = await sessions.get_session(sid)
        assert len(session["threads"]) == 1
        messages = session["threads"][0]["messages"]
        assert [(m["role"], m["text"]) for m in messages] == [
            ("user", "explain"),
            ("model", "it says doc"),
        ]
        assert session["threads"][0]["type"] == "discussion"
        assert session["updated_at"] == clock.now

    @pytest.mark.asyncio
    async def test_same_millisecond_appends_keep_order(self, owned_session, threads, sessions) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        thread = await threads.add_thread(sid, token, "ctx", "snip")

        stamps = []
        for i in range(5):
            result = await threads.add_message(sid, thread["thread_id"], token, "user", f"m{i}")
            stamps.append(result["timestamp"])

        assert stamps == sorted(stamps)
        assert len(set(stamps)) == 5
        session = await sessions.get_session(sid)
        assert [m["text"] for m in session["threads"][0]["messages"]] == [f"m{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_comment_thread_type(self, owned_session, threads, sessions) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]

        await threads.add_thread(sid, token, "ctx", "snip", "comment")

        session = await sessions.get_session(sid)
        assert session["threads"][0]["type"] == "comment"

    @pytest.mark.asyncio
    async def test_assistant_role_is_stored_as_model(self, owned_session, threads, sessions) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        thread = await threads.add_thread(sid, token, "ctx", "snip")

        await threads.add_message(sid, thread["thread_id"], token, "assistant", "answer")

        session = await sessions.get_session(sid)
        assert session["threads"][0]["messages"][0]["role"] == "model"

    @pytest.mark.asyncio
    async def test_parts_are_stored_and_text_derived(self, owned_session, threads, sessions) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        thread = await threads.add_thread(sid, token, "ctx", "snip")
        parts = [
            {"type": "text", "text": "Checking. "},
            {"type": "tool-invocation", "toolCallId": "c1", "toolName": "lookup", "state": "call"},
            {"type": "text", "text": "Done."},
        ]

        await threads.add_message(sid, thread["thread_id"], token, "model", None, parts)

        message = (await sessions.get_session(sid))["threads"][0]["messages"][0]
        assert message["text"] == "Checking. Done."
        assert message["parts"][1]["toolName"] == "lookup"
        assert message["parts"][1]["args"] == {}

    @pytest.mark.asyncio
    async def test_invalid_parts_rejected(self, owned_session, threads) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        thread = await threads.add_thread(sid, token, "ctx", "snip")

        with pytest.raises(ValidationError, match="parts"):
            await threads.add_message(
                sid, thread["thread_id"], token, "model", "x", [{"type": "video"}]
            )

    @pytest.mark.asyncio
    async def test_invalid_payloads(self, owned_session, threads, test_async_db) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]

        with pytest.raises(ValidationError):
            await threads.add_thread(sid, token, "", "snip")
        with pytest.raises(ValidationError):
            await threads.add_thread(sid, token, "ctx", "s" * 1025)
        with pytest.raises(ValidationError):
            await threads.add_thread(sid, token, "ctx", "snip", "bogus")

        thread = await threads.add_thread(sid, token, "ctx", "snip")
        with pytest.raises(ValidationError):
            await threads.add_message(sid, thread["thread_id"], token, "system", "hi")
        with pytest.raises(ValidationError):
            await threads.add_message(sid, thread["thread_id"], token, "user", "   ")

        assert await test_async_db.scalar(select(func.count()).select_from(ThreadModel)) == 1
        assert await test_async_db.scalar(select(func.count()).select_from(MessageModel)) == 0


class TestAuthorizationAndParentChain:

    @pytest.mark.asyncio
    async def test_wrong_token_checked_before_body(self, owned_session, threads) -> None:
        sid = owned_session["session_id"]

        with pytest.raises(ForbiddenError):
            await threads.add_thread(sid, "wrong", "", "")

    @pytest.mark.asyncio
    async def test_thread_from_other_session(self, owned_session, threads, sessions) -> None:
        other = await sessions.create_session("other")
        foreign = await threads.add_thread(
            other["session_id"], other["owner_token"], "ctx", "snip"
        )

        with pytest.raises(ThreadNotFoundError):
            await threads.add_message(
                owned_session["session_id"],
                foreign["thread_id"],
                owned_session["owner_token"],
                "user",
                "hi",
            )

    @pytest.mark.asyncio
    async def test_token_of_other_session_is_forbidden(self, owned_session, threads, sessions) -> None:
        other = await sessions.create_session("other")

        with pytest.raises(ForbiddenError):
            await threads.add_thread(owned_session["session_id"], other["owner_token"], "c", "s")


class TestUpdateMessage:

    @pytest.mark.asyncio
    async def test_edits_in_place(self, owned_session, threads, sessions, clock) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        thread = await threads.add_thread(sid, token, "ctx", "snip")
        added = await threads.add_message(sid, thread["thread_id"], token, "user", "draft")
        clock.advance(1000)

        result = await threads.update_message(sid, thread["thread_id"], added["message_id"], token, "final")

        session = await sessions.get_session(sid)
        message = session["threads"][0]["messages"][0]
        assert message["text"] == "final"
        assert message["id"] == added["message_id"]
        assert message["timestamp"] == added["timestamp"]
        assert result["timestamp"] == clock.now
        assert session["updated_at"] == clock.now

    @pytest.mark.asyncio
    async def test_edit_replaces_parts_with_text(self, owned_session, threads, sessions) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        thread = await threads.add_thread(sid, token, "ctx", "snip")
        added = await threads.add_message(
            sid, thread["thread_id"], token, "model", "old", [{"type": "text", "text": "old"}]
        )

        await threads.update_message(sid, thread["thread_id"], added["message_id"], token, "new")

        message = (await sessions.get_session(sid))["threads"][0]["messages"][0]
        assert message["parts"] == [{"type": "text", "text": "new"}]

    @pytest.mark.asyncio
    async def test_message_in_other_thread(self, owned_session, threads) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        first = await threads.add_thread(sid, token, "a", "a")
        second = await threads.add_thread(sid, token, "b", "b")
        added = await threads.add_message(sid, first["thread_id"], token, "user", "hi")

        with pytest.raises(MessageNotFoundError):
            await threads.update_message(sid, second["thread_id"], added["message_id"], token, "x")

    @pytest.mark.asyncio
    async def test_updated_at_never_moves_backwards(self, owned_session, threads, sessions, clock) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        clock.advance(5000)
        thread = await threads.add_thread(sid, token, "ctx", "snip")
        added = await threads.add_message(sid, thread["thread_id"], token, "user", "hi")
        high_water = (await sessions.get_session(sid))["updated_at"]

        clock.advance(-10_000)
        await threads.update_message(sid, thread["thread_id"], added["message_id"], token, "edit")

        assert (await sessions.get_session(sid))["updated_at"] == high_water
        assert thread["created_at"] == high_water


class TestTruncateThread:

    @pytest.fixture
    async def four_messages(self, owned_session, threads, clock) -> tuple[str, str, str, list[str]]:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        thread = await threads.add_thread(sid, token, "ctx", "snip")
        ids = []
        for i in range(4):
            clock.advance(1)
            result = await threads.add_message(sid, thread["thread_id"], token, "user", f"m{i}")
            ids.append(result["message_id"])
        return sid, token, thread["thread_id"], ids

    @pytest.mark.asyncio
    async def test_deletes_strict_suffix(self, four_messages, threads, sessions) -> None:
        sid, token, tid, ids = four_messages

        await threads.truncate_thread_after(sid, tid, ids[1], token)

        messages = (await sessions.get_session(sid))["threads"][0]["messages"]
        assert [m["id"] for m in messages] == ids[:2]

    @pytest.mark.asyncio
    async def test_is_idempotent(self, four_messages, threads, sessions) -> None:
        sid, token, tid, ids = four_messages

        await threads.truncate_thread_after(sid, tid, ids[1], token)
        first = await sessions.get_session(sid)
        await threads.truncate_thread_after(sid, tid, ids[1], token)
        second = await sessions.get_session(sid)

        assert first["threads"] == second["threads"]

    @pytest.mark.asyncio
    async def test_truncate_after_last_is_noop(self, four_messages, threads, sessions) -> None:
        sid, token, tid, ids = four_messages

        await threads.truncate_thread_after(sid, tid, ids[-1], token)

        messages = (await sessions.get_session(sid))["threads"][0]["messages"]
        assert [m["id"] for m in messages] == ids

    @pytest.mark.asyncio
    async def test_ties_broken_by_id(self, owned_session, threads, sessions, test_async_db) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        thread = await threads.add_thread(sid, token, "ctx", "snip")
        for message_id in ("ccc", "aaa", "bbb"):
            await message_crud.create(
                test_async_db,
                id=message_id,
                thread_id=thread["thread_id"],
                role="user",
                text=message_id,
                created_at=42,
            )
        await test_async_db.commit()

        ordered = (await sessions.get_session(sid))["threads"][0]["messages"]
        assert [m["id"] for m in ordered] == ["aaa", "bbb", "ccc"]

        await threads.truncate_thread_after(sid, thread["thread_id"], "aaa", token)

        remaining = (await sessions.get_session(sid))["threads"][0]["messages"]
        assert [m["id"] for m in remaining] == ["aaa"]

    @pytest.mark.asyncio
    async def test_missing_anchor(self, four_messages, threads) -> None:
        sid, token, tid, _ = four_messages

        with pytest.raises(ValidationError, match="after"):
            await threads.truncate_thread_after(sid, tid, None, token)
        with pytest.raises(MessageNotFoundError):
            await threads.truncate_thread_after(sid, tid, "unknown", token)

    @pytest.mark.asyncio
    async def test_requires_owner(self, four_messages, threads) -> None:
        sid, _, tid, ids = four_messages

        with pytest.raises(ForbiddenError):
            await threads.truncate_thread_after(sid, tid, ids[0], "nope")


class TestDeleteThread:

    @pytest.mark.asyncio
    async def test_removes_thread_and_messages(self, owned_session, threads, sessions, test_async_db) -> None:
        sid, token = owned_session["session_id"], owned_session["owner_token"]
        keep = await threads.add_thread(sid, token, "keep", "keep")
        drop = await threads.add_thread(sid, token, "drop", "drop")
        await threads.add_message(sid, drop["thread_id"], token, "user", "bye")

        await threads.delete_thread(sid, drop["thread_id"], token)

        session = await sessions.get_session(sid)
        assert [t["id"] for t in session["threads"]] == [keep["thread_id"]]
        assert await test_async_db.scalar(select(func.count()).select_from(MessageModel)) == 0

    @pytest.mark.asyncio
    async def test_unknown_thread(self, owned_session, threads) -> None:
        with pytest.raises(ThreadNotFoundError):
            await threads.delete_thread(
                owned_session["session_id"], "missing", owned_session["owner_token"]
            )
