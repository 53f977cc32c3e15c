from typing import Any

from app.database.models import AuditLogEntry
from app.database.repositories.audit_log_repository import AuditLogRepository
from app.logging.logger import Log


class AuditLogger:
    """Best-effort writer for the append-only audit log.

    A failed insert is logged and swallowed; auditing never fails the
    operation it describes.
    """

    def __init__(self, audit_repo: AuditLogRepository) -> None:
        self._audit_repo = audit_repo

    def record(
        self,
        action: str,
        entity: str,
        entity_id: str | None = None,
        user_identifier: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        entry = AuditLogEntry(
            action=action,
            entity=entity,
            entity_id=entity_id,
            user_identifier=user_identifier,
            metadata=metadata or {},
        )
        try:
            self._audit_repo.insert(entry)
        except Exception as exc:
            Log.warning(f"Audit log write failed for {action} on {entity} {entity_id}: {exc}")
