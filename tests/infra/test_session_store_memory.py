"""Testes para InMemorySessionStore e o contrato base de SessionStore."""

from __future__ import annotations

import pytest

from pennyworth.domain.session import (
    ConversationStep,
    DraftingState,
    GetPurposeState,
    Session,
    at_step,
)
from pennyworth.infra.session_store_memory import InMemorySessionStore
from tests.helpers.fakes import CHANNEL, OTHER_CHANNEL


class TestInMemorySessionStore:
    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        store = InMemorySessionStore()
        assert await store.get(CHANNEL) is None
        assert await store.exists(CHANNEL) is False

    @pytest.mark.asyncio
    async def test_get_or_create_does_not_persist(self) -> None:
        """Sessão nova só existe depois do save()."""
        store = InMemorySessionStore()
        session = await store.get_or_create(CHANNEL, "user-1", "bruce@wayne.com")

        assert session.step is ConversationStep.INITIAL
        assert session.email == "bruce@wayne.com"
        assert len(store) == 0

        await store.save(session)
        assert await store.get(CHANNEL) == session

    @pytest.mark.asyncio
    async def test_get_or_create_returns_existing(self) -> None:
        store = InMemorySessionStore()
        saved = Session(channel_id=CHANNEL, user_id="user-1", state=at_step(ConversationStep.CHATTING))
        await store.save(saved)

        assert await store.get_or_create(CHANNEL, "other", None) == saved

    @pytest.mark.asyncio
    async def test_one_session_per_channel(self) -> None:
        store = InMemorySessionStore()
        await store.save(Session(channel_id=CHANNEL, user_id="u"))
        await store.save(Session(channel_id=CHANNEL, user_id="u", state=at_step(ConversationStep.GET_RECIPIENT)))
        await store.save(Session(channel_id=OTHER_CHANNEL, user_id="v"))

        assert len(store) == 2
        assert (await store.get(CHANNEL)).step is ConversationStep.GET_RECIPIENT

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        store = InMemorySessionStore()
        await store.save(Session(channel_id=CHANNEL, user_id="u"))

        assert await store.delete(CHANNEL) is True
        assert await store.delete(CHANNEL) is False
        assert await store.get(CHANNEL) is None

    @pytest.mark.asyncio
    async def test_drafting_state_is_saved_as_fallback(self) -> None:
        """O passo transitório nunca é persistido."""
        store = InMemorySessionStore()
        fallback = GetPurposeState(recipient="bob@wayne.com")
        session = Session(
            channel_id=CHANNEL,
            user_id="u",
            state=DraftingState(recipient="bob@wayne.com", purpose="gala", fallback=fallback),
        )

        await store.save(session)

        assert (await store.get(CHANNEL)).state == fallback

    @pytest.mark.asyncio
    async def test_lock_is_per_channel(self) -> None:
        store = InMemorySessionStore()
        async with store.lock(CHANNEL):
            async with store.lock(OTHER_CHANNEL):
                pass
