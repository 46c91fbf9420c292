from __future__ import annotations

import json

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import NotificationEvent
from .outbox import NotificationOutbox


class MySQLNotificationOutbox(NotificationOutbox):
    """Stores events for the delivery worker; dedup_key is UNIQUE."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def publish(self, event: NotificationEvent) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO notifications (type, student_id, title, body, payload, dedup_key, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    event.type,
                    event.student_id,
                    event.title,
                    event.body,
                    json.dumps(event.to_dict()),
                    event.dedup_key,
                    event.created_at,
                ),
            )
            return cur.rowcount > 0
