from concurrent.futures import ThreadPoolExecutor

import pytest

from app.database.connection import Database
from app.database.models import DocumentRecord
from app.database.repositories.job_repository import JobRepository


def _set_job(db: Database, job_id: str, **columns: object) -> None:
    assignments = ", ".join(f"{name} = %s" for name in columns)
    with db.connection() as conn:
        conn.execute(
            f"UPDATE jobs SET {assignments} WHERE id = %s",
            (*columns.values(), job_id),
        )
        conn.commit()


@pytest.mark.integration
class TestJobAdmission:
    def test_creates_queued_job_once(
        self, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, created = job_repo.create_if_absent(seed_document.id, "parse")
        again, created_again = job_repo.create_if_absent(seed_document.id, "parse")

        assert created is True
        assert job.status == "queued"
        assert job.attempts == 0
        assert created_again is False
        assert again.id == job.id

    def test_concurrent_admissions_converge(
        self, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(
                pool.map(lambda _: job_repo.create_if_absent(seed_document.id, "parse"), range(6))
            )

        assert len({job.id for job, _ in results}) == 1
        assert sum(created for _, created in results) == 1

    def test_terminal_job_is_returned_not_replaced(
        self, db: Database, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, _ = job_repo.create_if_absent(seed_document.id, "parse")
        _set_job(db, job.id, status="done")

        again, created = job_repo.create_if_absent(seed_document.id, "parse")

        assert created is False
        assert again.id == job.id
        assert again.status == "done"


@pytest.mark.integration
class TestJobClaim:
    def test_claim_moves_to_running(
        self, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, _ = job_repo.create_if_absent(seed_document.id, "parse")

        assert job.id in {c.id for c in job_repo.find_claimable("parse", 1000)}
        claimed = job_repo.try_claim(job.id)

        assert claimed is not None
        assert claimed.status == "running"
        assert claimed.attempts == 1
        assert claimed.locked_at is not None
        assert job.id not in {c.id for c in job_repo.find_claimable("parse", 1000)}

    def test_concurrent_claims_have_one_winner(
        self, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, _ = job_repo.create_if_absent(seed_document.id, "parse")

        with ThreadPoolExecutor(max_workers=6) as pool:
            claims = list(pool.map(lambda _: job_repo.try_claim(job.id), range(6)))

        assert sum(claim is not None for claim in claims) == 1
        assert job_repo.find_by_id(job.id).attempts == 1

    def test_delayed_job_is_not_claimable(
        self, db: Database, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, _ = job_repo.create_if_absent(seed_document.id, "parse")
        job_repo.try_claim(job.id)
        assert job_repo.requeue(job.id, "HTTP 503", "download", 3600) is True

        stored = job_repo.find_by_id(job.id)
        assert stored.status == "queued"
        assert stored.error_kind == "download"
        assert job.id not in {c.id for c in job_repo.find_claimable("parse", 1000)}


@pytest.mark.integration
class TestJobTransitions:
    def test_mark_done_only_from_running(
        self, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, _ = job_repo.create_if_absent(seed_document.id, "parse")
        assert job_repo.mark_done(job.id, {"extractionId": "x"}) is False

        job_repo.try_claim(job.id)
        assert job_repo.mark_done(job.id, {"extractionId": "x"}) is True

        stored = job_repo.find_by_id(job.id)
        assert stored.status == "done"
        assert stored.result == {"extractionId": "x"}
        assert stored.locked_at is None

    def test_terminal_job_is_never_moved(
        self, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, _ = job_repo.create_if_absent(seed_document.id, "parse")
        job_repo.try_claim(job.id)
        job_repo.mark_error(job.id, "boom", "internal")

        assert job_repo.mark_done(job.id, {}) is False
        assert job_repo.requeue(job.id, "x", "download", 0) is False
        assert job_repo.try_claim(job.id) is None
        assert job_repo.find_by_id(job.id).status == "error"

    def test_reclaim_stale(
        self, db: Database, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, _ = job_repo.create_if_absent(seed_document.id, "parse")
        job_repo.try_claim(job.id)
        _set_job(db, job.id, locked_at="2000-01-01T00:00:00+00:00")

        requeued, _ = job_repo.reclaim_stale(60)

        assert requeued >= 1
        stored = job_repo.find_by_id(job.id)
        assert stored.status == "queued"
        assert stored.error_kind == "timeout"

    def test_reset_requires_terminal(
        self, job_repo: JobRepository, seed_document: DocumentRecord
    ) -> None:
        job, _ = job_repo.create_if_absent(seed_document.id, "parse")
        assert job_repo.reset(job.id) is None

        job_repo.try_claim(job.id)
        job_repo.mark_error(job.id, "boom", "internal")
        reset = job_repo.reset(job.id)

        assert reset is not None
        assert reset.status == "queued"
        assert reset.attempts == 0
        assert reset.error is None
