"""
Compilation Job Queue - parallel compilation with a bounded worker pool.

Jobs are pushed onto a queue and consumed by a fixed number of worker threads
(default: CPU count). Every submitted job runs to completion; there is no
cancellation and no timeout. Callers block in wait_for_completion() until all
of their jobs have finished.
"""

import logging
import multiprocessing
import threading
import time
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from queue import Queue
from threading import Condition, Lock, Thread
from typing import Callable, Optional

from nwcompile.errors import BuildError

logger = logging.getLogger(__name__)

# Runs one command line for one source file, returning an error value on failure
CommandExecutor = Callable[[str, Optional[str]], Optional[BuildError]]


class JobState(Enum):
    """Lifecycle of a compile job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CompilationJob:
    """One translation unit waiting for, or done with, the compiler."""

    job_id: str
    source_path: Path
    output_path: Path
    command_line: str
    state: JobState = JobState.PENDING
    error: Optional[BuildError] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    def duration(self) -> Optional[float]:
        """Wall-clock seconds the compiler ran, if the job has finished."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None

    @property
    def done(self) -> bool:
        return self.state in (JobState.COMPLETED, JobState.FAILED)


class CompilationJobQueue:
    """Fixed-size pool of compile workers fed from one FIFO queue."""

    def __init__(self, executor: CommandExecutor, num_workers: Optional[int] = None):
        """Create the pool (workers start in start()).

        Args:
            executor: Callable that runs one command line (ProcessRunner.run)
            num_workers: Pool size (default: CPU count)
        """
        self.executor = executor
        self.num_workers = max(1, num_workers or multiprocessing.cpu_count())
        self.job_queue: Queue[Optional[CompilationJob]] = Queue()
        self.jobs: dict[str, CompilationJob] = {}
        self.jobs_lock = Lock()
        self.jobs_done = Condition(self.jobs_lock)
        self.workers: list[Thread] = []
        self.running = False

        logger.debug(f"CompilationJobQueue initialized with {self.num_workers} workers")

    def __enter__(self) -> "CompilationJobQueue":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def start(self) -> None:
        """Spawn the worker threads."""
        if self.running:
            logger.warning("CompilationJobQueue already running")
            return

        self.running = True
        for i in range(self.num_workers):
            worker = Thread(target=self._worker_loop, name=f"CompilationWorker-{i}", daemon=True)
            worker.start()
            self.workers.append(worker)

        logger.debug(f"Started {self.num_workers} compilation workers")

    def submit_job(self, job: CompilationJob) -> str:
        """Queue a job for the next free worker.

        Args:
            job: Job to queue

        Returns:
            Job ID
        """
        if not self.running:
            raise RuntimeError("CompilationJobQueue is not running")

        with self.jobs_lock:
            self.jobs[job.job_id] = job

        self.job_queue.put(job)
        logger.debug(f"Job submitted: {job.job_id} (queue depth: {self.job_queue.qsize()})")
        return job.job_id

    def _worker_loop(self) -> None:
        """Worker thread main loop; a None item tells the worker to exit."""
        thread_name = threading.current_thread().name

        while True:
            job = self.job_queue.get()
            try:
                if job is None:
                    break
                self._execute_job(job)
            finally:
                self.job_queue.task_done()

        logger.debug(f"Worker {thread_name} exiting")

    def _execute_job(self, job: CompilationJob) -> None:
        """Run one job on the calling worker thread.

        Args:
            job: Job to run
        """
        with self.jobs_lock:
            job.state = JobState.RUNNING
            job.start_time = time.time()

        try:
            error = self.executor(job.command_line, str(job.source_path))
        except Exception as e:
            logger.error(f"Job {job.job_id} raised: {e}", exc_info=True)
            error = BuildError.process_failed(f"Failed to run compiler: {e}", -1, str(job.source_path))

        with self.jobs_done:
            job.error = error
            job.state = JobState.COMPLETED if error is None else JobState.FAILED
            job.end_time = time.time()
            self.jobs_done.notify_all()

        if error is None:
            logger.debug(f"Job {job.job_id} completed ({job.duration() or 0.0:.2f}s)")
        else:
            logger.debug(f"Job {job.job_id} failed with exit code {error.code}: {job.source_path.name}")

    def wait_for_completion(self, job_ids: list[str]) -> bool:
        """Block until every listed job has finished.

        Args:
            job_ids: Jobs to wait for

        Returns:
            True if none of the jobs failed
        """
        with self.jobs_done:
            self.jobs_done.wait_for(lambda: all(self.jobs[jid].done for jid in job_ids if jid in self.jobs))
            return all(self.jobs[jid].state == JobState.COMPLETED for jid in job_ids if jid in self.jobs)

    def get_statistics(self) -> dict[str, int]:
        """Job counts per state, plus the total, for progress logging."""
        with self.jobs_lock:
            counts = Counter(job.state for job in self.jobs.values())
            stats = {"total_jobs": len(self.jobs)}
            stats.update({state.value: counts[state] for state in JobState})
            return stats

    def shutdown(self) -> None:
        """Let queued jobs finish, then stop the worker threads."""
        if not self.running:
            return

        self.running = False
        for _ in self.workers:
            self.job_queue.put(None)
        for worker in self.workers:
            worker.join()

        self.workers.clear()
        logger.debug("CompilationJobQueue shut down")
