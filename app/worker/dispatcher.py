from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import psycopg

from app.config.settings import Settings
from app.database.models import JobKind, JobRecord
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.worker.job_runner import JobOutcome, JobRunner


@dataclass
class DispatchReport:
    processed: int = 0
    results: list[JobOutcome] = field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        return {
            "processed": self.processed,
            "results": [outcome.to_payload() for outcome in self.results],
        }


class Dispatcher:
    """One poll cycle: reclaim stale jobs, claim a FIFO batch, run each claimed job.

    Holds no state between cycles. Safe to run concurrently with itself,
    since every claim is a status-guarded update and a lost claim is skipped.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings

    def run_cycle(self) -> DispatchReport:
        requeued, failed = self._job_repo.reclaim_stale(self._settings.job_stale_after_seconds)
        if requeued or failed:
            Log.warning(f"Reclaimed stale jobs: {requeued} requeued, {failed} failed")

        candidates = self._job_repo.find_claimable(
            JobKind.PARSE.value, self._settings.dispatcher_batch_size
        )
        if not candidates:
            Log.debug("No claimable jobs")
            return DispatchReport()

        Log.info(f"Found {len(candidates)} claimable job(s)")
        if self._settings.dispatcher_concurrency > 1:
            with ThreadPoolExecutor(
                max_workers=self._settings.dispatcher_concurrency,
                thread_name_prefix="dispatcher",
            ) as pool:
                outcomes = list(pool.map(self._claim_and_run, candidates))
        else:
            outcomes = [self._claim_and_run(job) for job in candidates]

        results = [outcome for outcome in outcomes if outcome is not None]
        return DispatchReport(processed=len(results), results=results)

    def _claim_and_run(self, candidate: JobRecord) -> JobOutcome | None:
        try:
            job = self._job_repo.try_claim(candidate.id)
        except psycopg.Error as exc:
            Log.warning(f"Could not claim job {candidate.id}, will retry: {exc}")
            return None

        if job is None:
            Log.info(f"Job {candidate.id} already claimed by another dispatcher, skipping")
            return None
        return self._job_runner.run(job)
