from psycopg.types.json import Jsonb

from app.database.connection import Database
from app.database.models import AuditLogEntry


class AuditLogRepository:
    """Insert-only access to the audit_logs table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def insert(self, entry: AuditLogEntry) -> None:
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO audit_logs
                    (action, entity, entity_id, user_identifier, metadata)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (
                    entry.action,
                    entry.entity,
                    entry.entity_id,
                    entry.user_identifier,
                    Jsonb(entry.metadata),
                ),
            )
            conn.commit()
