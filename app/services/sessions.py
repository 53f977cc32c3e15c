import hashlib
import secrets

SESSION_ID_BYTES = 32


def new_session_id() -> str:
    """Unguessable ownership token for an anonymous upload (256 bits)."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def session_fingerprint(session_id: str) -> str:
    """Stable, non-reversible label for a session, safe to write to the audit log."""
    digest = hashlib.sha256(session_id.encode("utf-8")).hexdigest()
    return f"session:{digest[:16]}"


def session_matches(expected: str, provided: str) -> bool:
    return secrets.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))
