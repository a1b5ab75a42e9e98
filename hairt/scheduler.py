"""
Single-threaded periodic scheduler.
Jobs run one at a time on the calling thread; a job is rescheduled one interval after it finishes,
so runs never overlap.
"""

import logging
import time

logger = logging.getLogger(__name__)


class Job:
    def __init__(self, callback, seconds, next_run):
        self.callback = callback
        self.seconds = seconds
        self.next_run = next_run

    def __repr__(self):
        name = getattr(self.callback, '__name__', repr(self.callback))
        return f"Job({name}, every {self.seconds}s)"


class Scheduler:
    def __init__(self, clock=time.monotonic, sleep=time.sleep):
        self.clock = clock
        self.sleep = sleep
        self.jobs = {}

    def run_every(self, seconds, callback):
        """Run `callback` every `seconds`, first after one interval.
        Scheduling the same callback again replaces the earlier job.
        """
        if seconds <= 0:
            raise ValueError(f"invalid interval {seconds}")
        job = Job(callback, seconds, self.clock() + seconds)
        self.jobs[callback] = job
        logger.debug("scheduled %s", job)
        return job

    def run_pending(self):
        """Run the jobs that are due. Returns the number of jobs run."""
        count = 0
        for job in sorted(self.jobs.values(), key=lambda j: j.next_run):
            if job.next_run > self.clock():
                continue
            try:
                job.callback()
            except Exception as e:      # pylint: disable=broad-exception-caught
                logger.exception("%s failed: %s", job, e)
            job.next_run = self.clock() + job.seconds
            count += 1
        return count

    def idle_seconds(self):
        if not self.jobs:
            return None
        return max(0, min(job.next_run for job in self.jobs.values()) - self.clock())

    def run_forever(self, max_runs=None):
        """Sleep until the next job is due and run it. Returns when there are no jobs,
        or after `max_runs` jobs have run."""
        runs = 0
        while self.jobs:
            if max_runs is not None and runs >= max_runs:
                break
            self.sleep(self.idle_seconds())
            runs += self.run_pending()
        return runs
