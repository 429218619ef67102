"""One-shot flash messages carried in the signed session cookie."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, MutableMapping

FLASH_SESSION_KEY = "flash_messages"


@dataclass(frozen=True)
class FlashMessage:
    category: str
    message: str


def push_flash(session: MutableMapping[str, object], flash: FlashMessage) -> None:
    """Queue ``flash`` for the next rendered page."""

    messages = session.get(FLASH_SESSION_KEY)
    if not isinstance(messages, list):
        messages = []
    messages.append({"category": flash.category, "message": flash.message})
    session[FLASH_SESSION_KEY] = messages


def consume_flash(session: MutableMapping[str, object]) -> List[FlashMessage]:
    """Return and forget every queued message."""

    raw = session.pop(FLASH_SESSION_KEY, [])
    if not isinstance(raw, list):
        return []

    messages: List[FlashMessage] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        message = entry.get("message")
        if not message:
            continue
        messages.append(FlashMessage(category=str(entry.get("category") or "info"), message=str(message)))
    return messages


def messages_for(messages: Iterable[FlashMessage], category: str) -> List[str]:
    return [flash.message for flash in messages if flash.category == category]


__all__ = ["FLASH_SESSION_KEY", "FlashMessage", "consume_flash", "messages_for", "push_flash"]
