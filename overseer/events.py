"""
Outbound notifications for connected players.

Events are plain dicts with a "type" key, queued on the player's outbound
channel. Delivery is best effort and happens after the command returns.
"""

from typing import Any

# Type alias for events (message dicts sent to players)
Event = dict[str, Any]

# Chat categories understood by the client
ANNOUNCEMENT = "announcement"
SYSTEM = "system"

KICKED_BY_ADMIN = "kicked_by_admin"


def system_chat(text: str, message_type: str = SYSTEM) -> Event:
    return {"type": "chat", "message_type": message_type, "text": text}


def announcement(text: str) -> Event:
    return system_chat(f"[System Announcement] {text}", ANNOUNCEMENT)


def magic_leveled(info_index: int, level: int, experience: int) -> Event:
    return {
        "type": "magic_leveled",
        "info_index": info_index,
        "level": level,
        "experience": experience,
    }


def new_magic(magic: dict[str, Any]) -> Event:
    return {"type": "new_magic", "magic": magic}


def disconnect(reason: str) -> Event:
    return {"type": "disconnect", "reason": reason}
