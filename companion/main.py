"""Companion console entry point."""

import asyncio
import logging
import sys

from companion.bot.handlers import Companion
from companion.config import settings
from companion.memory.store import MemoryStoreError

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)

HELP = "Commands: /memories, /forget <id>, /quit"


async def _show_memories(companion: Companion, user_id: str) -> None:
    memories = await companion.list_memories(user_id)
    if not memories:
        print("No memories yet.")
        return
    for m in memories:
        tags = ", ".join(m.tags)
        print(f"{m.id}  [{m.importance:.0%}] {m.content[:70]}  ({tags})")


async def _forget(companion: Companion, memory_id: str) -> None:
    try:
        await companion.forget(memory_id)
        print("Memory deleted.")
    except MemoryStoreError as e:
        print(f"Could not delete memory: {e}")


async def run(user_id: str) -> None:
    """Read lines from stdin and reply until EOF or /quit."""
    companion = Companion()
    logger.info("Starting %s for user %s", settings.companion_name, user_id)
    print(HELP)
    try:
        print(f"{settings.companion_name}: {await companion.greeting(user_id)}")
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            text = line.strip()
            if not text:
                continue
            if text == "/quit":
                break
            if text == "/memories":
                await _show_memories(companion, user_id)
            elif text.startswith("/forget "):
                await _forget(companion, text.removeprefix("/forget ").strip())
            else:
                reply = await companion.handle_message(user_id, text)
                print(f"{settings.companion_name}: {reply}")
    finally:
        await companion.drain()


def main() -> None:
    """Start an interactive session. Optional first argument is the user id."""
    user_id = sys.argv[1] if len(sys.argv) > 1 else "local"
    asyncio.run(run(user_id))


if __name__ == "__main__":
    main()
