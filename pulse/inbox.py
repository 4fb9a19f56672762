"""Notification inbox for a single user."""

from __future__ import annotations

import logging
from typing import Any

from pulse.errors import NotFoundError
from pulse.storage import queries
from pulse.storage.database import Database

logger = logging.getLogger(__name__)


def list_inbox(
    db: Database, user_id: int, *, unread_only: bool = False, limit: int = 50
) -> dict[str, Any]:
    """Return ``{"notifications": [...], "unread": n}`` for a user."""
    return {
        "notifications": queries.list_notifications(
            db, user_id, unread_only=unread_only, limit=limit
        ),
        "unread": queries.count_unread_notifications(db, user_id),
    }


def mark_read(db: Database, user_id: int, notification_id: int) -> None:
    """Mark one notification read. Raises NotFoundError if it is not the user's."""
    with db.transaction():
        found = queries.mark_notification_read(db, notification_id, user_id)
    if not found:
        raise NotFoundError("Notification", notification_id)


def mark_all_read(db: Database, user_id: int) -> int:
    """Mark all of a user's notifications read. Returns how many changed."""
    with db.transaction():
        count = queries.mark_all_notifications_read(db, user_id)
    logger.debug("Marked %d notification(s) read for user %s", count, user_id)
    return count
