"""Tests for the conversation turn pipeline."""

from unittest.mock import AsyncMock

import pytest
from conftest import make_memory

from companion.bot.handlers import (
    FALLBACK_RESPONSE,
    FIRST_GREETINGS,
    RETURNING_GREETING,
    RETURNING_GREETING_WITH_TOPICS,
    Companion,
)
from companion.bot.session import get_session
from companion.llm.prompt import UserProfile
from companion.memory.store import MemoryNotFoundError, MemoryStore

pytestmark = pytest.mark.usefixtures("_no_turso")


@pytest.fixture
def generator() -> AsyncMock:
    return AsyncMock(return_value="That sounds meaningful.")


@pytest.fixture
def companion(store: MemoryStore, generator: AsyncMock) -> Companion:
    return Companion(store=store, reply_generator=generator)


async def test_turn_saves_user_and_reply(companion: Companion, store: MemoryStore) -> None:
    text = "My name is Jordan and I work as a nurse at the hospital"

    reply = await companion.handle_message("u1", text)
    await companion.drain()

    assert reply == "That sounds meaningful."
    stored = {m.content: m.importance for m in await store.query_all("u1")}
    assert stored[text] == pytest.approx(1.0)
    assert stored["Serenity: That sounds meaningful."] == pytest.approx(0.4)


async def test_trivial_message_not_saved_and_no_recall(
    companion: Companion, store: MemoryStore, generator: AsyncMock
) -> None:
    await companion.handle_message("u1", "hi")
    await companion.drain()

    _, _, _, memories = generator.call_args.args
    assert memories == []
    contents = [m.content for m in await store.query_all("u1")]
    assert contents == ["Serenity: That sounds meaningful."]


async def test_session_history_passed_to_generator(
    companion: Companion, generator: AsyncMock
) -> None:
    await companion.handle_message("u1", "first message")
    await companion.handle_message("u1", "second message")

    text, history, _, _ = generator.call_args.args
    assert text == "second message"
    assert [m.content for m in history] == ["first message", "That sounds meaningful."]
    assert len(get_session("u1").messages) == 4


async def test_crisis_message_bypasses_generator(
    companion: Companion, store: MemoryStore, generator: AsyncMock
) -> None:
    text = "I think I want to kill myself"

    reply = await companion.handle_message("u1", text)
    await companion.drain()

    generator.assert_not_called()
    assert "988" in reply
    stored = {m.content: m.importance for m in await store.query_all("u1")}
    assert stored[text] == 1.0


async def test_generation_failure_returns_fallback(
    companion: Companion, store: MemoryStore, generator: AsyncMock
) -> None:
    generator.side_effect = RuntimeError("API overloaded")

    reply = await companion.handle_message("u1", "Yesterday i decided to change careers")
    await companion.drain()

    assert reply == FALLBACK_RESPONSE
    contents = [m.content for m in await store.query_all("u1")]
    assert contents == ["Yesterday i decided to change careers"]
    assert [m.sender for m in get_session("u1").messages] == ["user", "companion"]
    assert get_session("u1").messages[-1].content == FALLBACK_RESPONSE


async def test_recalled_memories_reach_generator_and_are_touched(generator: AsyncMock) -> None:
    recalled = [make_memory("m1", content="Boss yelled at work", importance=0.9)]
    store = AsyncMock()
    composer = AsyncMock()
    composer.get_context.return_value = recalled
    companion = Companion(store=store, composer=composer, reply_generator=generator)

    await companion.handle_message("u1", "Work was hard again today honestly")
    await companion.drain()

    _, _, _, memories = generator.call_args.args
    assert memories == recalled
    store.touch.assert_awaited_once_with(["m1"])


async def test_write_failure_does_not_block_turn(generator: AsyncMock) -> None:
    store = AsyncMock()
    store.save.return_value = None
    composer = AsyncMock()
    composer.get_context.return_value = []
    companion = Companion(store=store, composer=composer, reply_generator=generator)

    reply = await companion.handle_message("u1", "My name is Jordan and I work nights")
    await companion.drain()

    assert reply == "That sounds meaningful."
    assert store.save.await_count == 2


# -- user-facing pass-throughs ----------------------------------------------


async def test_list_and_forget(companion: Companion, store: MemoryStore) -> None:
    memory = await store.save("u1", "I started a new job this week", 0.6)

    assert [m.id for m in await companion.list_memories("u1")] == [memory.id]
    await companion.forget(memory.id)
    assert await companion.list_memories("u1") == []


async def test_forget_missing_memory_raises(companion: Companion) -> None:
    with pytest.raises(MemoryNotFoundError):
        await companion.forget("nonexistent")


# -- greeting ----------------------------------------------------------------


async def test_greeting_for_new_user(companion: Companion) -> None:
    text = await companion.greeting("u1", UserProfile(name="Jordan"))

    assert text in [g.format(name="Jordan") for g in FIRST_GREETINGS]
    (opening,) = get_session("u1").messages
    assert opening.sender == "companion"
    assert opening.content == text


async def test_greeting_welcomes_back_user_with_tagged_memories(
    companion: Companion, store: MemoryStore
) -> None:
    await store.save("u1", "Work has me so stressed lately", 0.7)

    text = await companion.greeting("u1", UserProfile(name="Jordan"))

    assert text == RETURNING_GREETING_WITH_TOPICS.format(name="Jordan")


async def test_greeting_welcomes_back_user_without_tags(
    companion: Companion, store: MemoryStore
) -> None:
    await store.save("u1", "I quit smoking last month", 0.6)

    assert await companion.greeting("u1") == RETURNING_GREETING.format(name="friend")


async def test_greeting_ignores_other_users_memories(
    companion: Companion, store: MemoryStore
) -> None:
    await store.save("u2", "Work has me so stressed lately", 0.7)

    text = await companion.greeting("u1")

    assert text in [g.format(name="friend") for g in FIRST_GREETINGS]


async def test_greeting_survives_store_failure(generator: AsyncMock) -> None:
    store = AsyncMock()
    store.query_important.side_effect = RuntimeError("db down")
    companion = Companion(store=store, composer=AsyncMock(), reply_generator=generator)

    text = await companion.greeting("u1")

    assert text in [g.format(name="friend") for g in FIRST_GREETINGS]
    store.query_important.assert_awaited_once_with("u1", 3)
