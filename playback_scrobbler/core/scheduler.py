"""Fixed-interval driver for the scrobble loop."""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from apscheduler.events import EVENT_JOB_MAX_INSTANCES
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

TICK_JOB_ID = "scrobble_tick"


class TickScheduler:
    """Calls the tick function every ``poll_interval`` seconds.

    At most one tick runs at a time. If a tick is still running when the
    next one is due, the due tick is dropped and logged instead of queued.
    """

    def __init__(
        self,
        logger: logging.Logger,
        tick_function: Callable[[], None],
        poll_interval: int = 2
    ):
        """Initialize scheduler.

        Args:
            logger: Logger instance
            tick_function: Called once per tick without arguments
            poll_interval: Seconds between ticks
        """
        self.logger = logger
        self.tick_function = tick_function
        self.poll_interval = poll_interval
        self.ticks = 0
        self.skipped = 0

        self.scheduler = BackgroundScheduler()
        self.scheduler.add_listener(self._on_tick_skipped, EVENT_JOB_MAX_INSTANCES)

    def start(self, run_now: bool = False) -> None:
        """Start ticking in a background thread.

        Args:
            run_now: Run the first tick immediately instead of after one interval
        """
        self.logger.info(f"Polling sources every {self.poll_interval}s")

        job_options = {}
        if run_now:
            # an explicit None would add the job paused
            job_options['next_run_time'] = datetime.now()

        try:
            self.scheduler.add_job(
                self._run_tick,
                trigger=IntervalTrigger(seconds=self.poll_interval),
                id=TICK_JOB_ID,
                name="Scrobble Tick",
                max_instances=1,
                coalesce=True,
                misfire_grace_time=self.poll_interval,
                replace_existing=True,
                **job_options
            )
            self.scheduler.start()
        except Exception as e:
            self.logger.error(f"Failed to start scheduler: {e}")
            raise

    def stop(self) -> None:
        """Stop ticking, waiting for a running tick to finish."""
        if not self.scheduler.running:
            return

        try:
            self.scheduler.shutdown(wait=True)
        except Exception as e:
            self.logger.error(f"Error stopping scheduler: {e}")
            return

        self.logger.info(f"Scheduler stopped after {self.ticks} tick(s), {self.skipped} skipped")

    def _run_tick(self) -> None:
        """Run one tick; errors are logged and the schedule keeps going."""
        started = time.monotonic()
        self.ticks += 1

        try:
            self.tick_function()
        except Exception as e:
            self.logger.error(f"Error in scheduled tick: {e}", exc_info=True)

        elapsed = time.monotonic() - started
        if elapsed > self.poll_interval:
            self.logger.warning(
                f"Tick took {elapsed:.1f}s, longer than the {self.poll_interval}s poll interval"
            )

    def _on_tick_skipped(self, event) -> None:
        self.skipped += 1
        self.logger.debug(f"Previous tick still running, skipped {len(event.scheduled_run_times)} tick(s)")

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(TICK_JOB_ID)
        return job.next_run_time if job else None

    def is_running(self) -> bool:
        return self.scheduler.running
