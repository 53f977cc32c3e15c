import time

from app.config.settings import Settings
from app.logging.logger import Log
from app.worker.dispatcher import DispatchReport, Dispatcher


class Worker:
    """Poll loop: dispatch cycle -> sleep when idle."""

    def __init__(self, dispatcher: Dispatcher, settings: Settings) -> None:
        self._dispatcher = dispatcher
        self._settings = settings

    def run(self, max_cycles: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_cycles is set, stop after that many cycles (for testing).
        """
        Log.info("Worker started, polling for jobs")
        cycles = 0
        try:
            while max_cycles is None or cycles < max_cycles:
                report = self._run_cycle()
                cycles += 1
                if report.processed == 0 and (max_cycles is None or cycles < max_cycles):
                    Log.debug("No jobs processed, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def _run_cycle(self) -> DispatchReport:
        """Run one cycle. Gracefully handle DB errors."""
        try:
            return self._dispatcher.run_cycle()
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return DispatchReport()
