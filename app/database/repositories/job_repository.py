from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import Database
from app.database.models import JobRecord, JobStatus
from app.exceptions import BackendError, ErrorKind

_COLUMNS = """
    id, document_id, kind, status, attempts, error, error_kind, result,
    locked_at, available_at, created_at, updated_at
"""

STALE_JOB_MESSAGE = "Job exceeded its running deadline"


class JobRepository:
    """Database operations for the jobs table.

    Every pipeline transition is a single status-guarded statement, so a
    terminal row is never moved and concurrent dispatchers cannot both claim
    one job.
    """

    def __init__(self, db: Database, max_attempts: int) -> None:
        self._db = db
        self._max_attempts = max_attempts

    def create_if_absent(self, document_id: str, kind: str) -> tuple[JobRecord, bool]:
        """Return the document's job of this kind, inserting a queued one if none exists.

        The partial unique index on (document_id, kind) turns a concurrent
        second insert into a no-op; the loser re-reads and returns the winner.

        Returns:
            (job, created) where created is False when an existing job was returned.
        """
        existing = self.find_latest_for_document(document_id, kind)
        if existing is not None:
            return existing, False

        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO jobs (document_id, kind, status)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (document_id, kind)
                        WHERE status IN ('queued', 'running')
                        DO NOTHING
                    RETURNING {_COLUMNS}
                    """,
                    (document_id, kind, JobStatus.QUEUED.value),
                )
                row = cur.fetchone()
            conn.commit()

        if row is not None:
            return _to_record(row), True

        winner = self.find_latest_for_document(document_id, kind)
        if winner is None:
            raise BackendError(
                f"Job admission for document {document_id} conflicted but no job was found"
            )
        return winner, False

    def find_latest_for_document(self, document_id: str, kind: str) -> JobRecord | None:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM jobs
                    WHERE document_id = %s AND kind = %s
                    ORDER BY created_at DESC
                    LIMIT 1
                    """,
                    (document_id, kind),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def find_by_id(self, job_id: str) -> JobRecord | None:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM jobs WHERE id = %s", (job_id,))
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def find_claimable(self, kind: str, limit: int) -> list[JobRecord]:
        """List queued jobs that are due, oldest first."""
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM jobs
                    WHERE kind = %s
                      AND status = %s
                      AND available_at <= NOW()
                    ORDER BY created_at
                    LIMIT %s
                    """,
                    (kind, JobStatus.QUEUED.value, limit),
                )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def try_claim(self, job_id: str) -> JobRecord | None:
        """Atomically move one job from queued to running.

        Returns None when another dispatcher already claimed it.
        """
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE jobs
                    SET status = %s, attempts = attempts + 1,
                        locked_at = NOW(), updated_at = NOW()
                    WHERE id = %s AND status = %s
                    RETURNING {_COLUMNS}
                    """,
                    (JobStatus.RUNNING.value, job_id, JobStatus.QUEUED.value),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            return None
        return _to_record(row)

    def mark_done(self, job_id: str, result: dict[str, Any]) -> bool:
        """Mark a running job as done. Returns False if it was not running."""
        return self._update_running(
            """
            UPDATE jobs
            SET status = %s, result = %s, error = NULL, error_kind = NULL,
                locked_at = NULL, updated_at = NOW()
            WHERE id = %s AND status = %s
            """,
            (JobStatus.DONE.value, Jsonb(result), job_id, JobStatus.RUNNING.value),
        )

    def mark_error(self, job_id: str, error: str, error_kind: str) -> bool:
        """Mark a running job as permanently failed. Returns False if it was not running."""
        return self._update_running(
            """
            UPDATE jobs
            SET status = %s, error = %s, error_kind = %s,
                locked_at = NULL, updated_at = NOW()
            WHERE id = %s AND status = %s
            """,
            (JobStatus.ERROR.value, error, error_kind, job_id, JobStatus.RUNNING.value),
        )

    def requeue(
        self,
        job_id: str,
        error: str,
        error_kind: str,
        delay_seconds: float,
    ) -> bool:
        """Return a running job to the queue, due after delay_seconds."""
        return self._update_running(
            """
            UPDATE jobs
            SET status = %s, error = %s, error_kind = %s, locked_at = NULL,
                available_at = NOW() + make_interval(secs => %s::double precision),
                updated_at = NOW()
            WHERE id = %s AND status = %s
            """,
            (
                JobStatus.QUEUED.value,
                error,
                error_kind,
                delay_seconds,
                job_id,
                JobStatus.RUNNING.value,
            ),
        )

    def reclaim_stale(self, stale_after_seconds: int) -> tuple[int, int]:
        """Recover jobs stuck in running after a worker died.

        Jobs with attempts left go back to the queue; the rest become error.

        Returns:
            (requeued, failed) row counts.
        """
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE jobs
                    SET status = %s, error = %s, error_kind = %s,
                        locked_at = NULL, updated_at = NOW()
                    WHERE status = %s
                      AND locked_at < NOW() - make_interval(secs => %s::double precision)
                      AND attempts >= %s
                    """,
                    (
                        JobStatus.ERROR.value,
                        STALE_JOB_MESSAGE,
                        ErrorKind.TIMEOUT.value,
                        JobStatus.RUNNING.value,
                        stale_after_seconds,
                        self._max_attempts,
                    ),
                )
                failed = cur.rowcount
                cur.execute(
                    """
                    UPDATE jobs
                    SET status = %s, error = %s, error_kind = %s,
                        locked_at = NULL, available_at = NOW(), updated_at = NOW()
                    WHERE status = %s
                      AND locked_at < NOW() - make_interval(secs => %s::double precision)
                      AND attempts < %s
                    """,
                    (
                        JobStatus.QUEUED.value,
                        STALE_JOB_MESSAGE,
                        ErrorKind.TIMEOUT.value,
                        JobStatus.RUNNING.value,
                        stale_after_seconds,
                        self._max_attempts,
                    ),
                )
                requeued = cur.rowcount
            conn.commit()
        return requeued, failed

    def reset(self, job_id: str) -> JobRecord | None:
        """Operator reset of a terminal job back to queued with a fresh attempt budget.

        Returns None if the job does not exist or is not terminal.
        """
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE jobs
                    SET status = %s, attempts = 0, error = NULL, error_kind = NULL,
                        result = NULL, locked_at = NULL, available_at = NOW(),
                        updated_at = NOW()
                    WHERE id = %s AND status IN (%s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (
                        JobStatus.QUEUED.value,
                        job_id,
                        JobStatus.DONE.value,
                        JobStatus.ERROR.value,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            return None
        return _to_record(row)

    def list_recent(self, status: str | None = None, limit: int = 20) -> list[JobRecord]:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                if status is None:
                    cur.execute(
                        f"SELECT {_COLUMNS} FROM jobs ORDER BY created_at DESC LIMIT %s",
                        (limit,),
                    )
                else:
                    cur.execute(
                        f"""
                        SELECT {_COLUMNS} FROM jobs
                        WHERE status = %s
                        ORDER BY created_at DESC
                        LIMIT %s
                        """,
                        (status, limit),
                    )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def delete_for_document(self, document_id: str) -> int:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM jobs WHERE document_id = %s", (document_id,))
                deleted = cur.rowcount
            conn.commit()
        return deleted

    def _update_running(self, query: str, params: tuple[Any, ...]) -> bool:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                updated = cur.rowcount > 0
            conn.commit()
        return updated


def _to_record(row: dict[str, Any]) -> JobRecord:
    return JobRecord(
        id=str(row["id"]),
        document_id=str(row["document_id"]),
        kind=row["kind"],
        status=row["status"],
        attempts=row["attempts"],
        error=row["error"],
        error_kind=row["error_kind"],
        result=row["result"],
        locked_at=row["locked_at"],
        available_at=row["available_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
