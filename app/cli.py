"""Operator commands: inspect and reset jobs, run one dispatcher cycle."""

import argparse
import json
import sys

from app.config.settings import Settings
from app.container import Container, build_container
from app.database.models import JobStatus
from app.logging.logger import Log


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docinsight", description=__doc__)
    commands = parser.add_subparsers(dest="command", required=True)

    reset = commands.add_parser("reset-job", help="move a done/error job back to queued")
    reset.add_argument("job_id")

    list_jobs = commands.add_parser("list-jobs", help="show the most recent jobs")
    list_jobs.add_argument("--status", choices=[status.value for status in JobStatus])
    list_jobs.add_argument("--limit", type=int, default=20)

    commands.add_parser("dispatch-once", help="run a single dispatcher cycle")
    return parser


def reset_job(container: Container, job_id: str) -> int:
    job = container.job_repo.find_by_id(job_id)
    if job is None:
        print(f"Job {job_id} not found", file=sys.stderr)
        return 1
    if not job.is_terminal:
        print(f"Job {job_id} is {job.status}; only done or error jobs can be reset", file=sys.stderr)
        return 1

    reset = container.job_repo.reset(job_id)
    if reset is None:
        print(f"Job {job_id} changed state while resetting; try again", file=sys.stderr)
        return 1
    removed = container.extraction_repo.delete_for_document(reset.document_id)
    container.doc_repo.reset_status(reset.document_id)
    Log.info(
        f"Operator reset job {job_id} (removed {removed} extraction(s))",
        document_id=reset.document_id,
    )
    print(f"Job {job_id} reset to {reset.status}")
    return 0


def list_jobs(container: Container, status: str | None, limit: int) -> int:
    for job in container.job_repo.list_recent(status=status, limit=limit):
        line = f"{job.id}  {job.status:<7}  attempts={job.attempts}  document={job.document_id}"
        if job.error:
            line += f"  error={job.error_kind}: {job.error}"
        print(line)
    return 0


def dispatch_once(container: Container) -> int:
    report = container.dispatcher.run_cycle()
    print(json.dumps(report.to_payload(), indent=2))
    return 0


def run(args: argparse.Namespace, container: Container) -> int:
    if args.command == "reset-job":
        return reset_job(container, args.job_id)
    if args.command == "list-jobs":
        return list_jobs(container, args.status, args.limit)
    return dispatch_once(container)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    container = build_container(settings)
    try:
        return run(args, container)
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
