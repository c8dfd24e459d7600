"""Rate-limited dispatch queue that runs extraction jobs one at a time."""

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Optional

from .dataclasses import (
    ErrorKind,
    ExtractionFailure,
    ExtractionRequest,
    ExtractionResult,
    JobState,
    QueueJob,
)

JobRunner = Callable[[ExtractionRequest], Awaitable[ExtractionResult]]


class DispatchQueue:
    """Serializes extraction jobs into a single worker with a cool-down between jobs.

    Jobs run in submission order and never overlap. After a job finishes the
    worker waits ``cooldown_seconds`` only if another job is already waiting;
    once the queue is empty the worker exits and the next enqueue starts a new one.

    All state lives on one asyncio event loop, so no lock is taken. Calling
    ``enqueue`` from another thread is not supported.
    """

    def __init__(self, runner: JobRunner, cooldown_seconds: float = 3.0) -> None:
        self.runner = runner
        self.cooldown_seconds = cooldown_seconds
        self.logger = logging.getLogger(__name__)

        self._jobs: Deque[QueueJob] = deque()
        self._draining = False
        self._worker: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        """Number of jobs waiting to start."""
        return len(self._jobs)

    @property
    def is_draining(self) -> bool:
        return self._draining

    def enqueue(self, request: ExtractionRequest) -> QueueJob:
        """Append a job and make sure a worker is draining the queue."""
        loop = asyncio.get_running_loop()
        job = QueueJob(request=request, completion=loop.create_future())
        self._jobs.append(job)
        self.logger.debug(f"Queued {request.raw_artist_url} ({self.pending} waiting)")

        if not self._draining:
            # Flag is set before the task runs so back-to-back enqueues share one worker
            self._draining = True
            self._worker = loop.create_task(self._drain())

        return job

    async def submit(self, request: ExtractionRequest) -> ExtractionResult:
        """Queue a request and wait for its result."""
        job = self.enqueue(request)
        return await asyncio.shield(job.completion)

    async def join(self) -> None:
        """Wait until the queue has been fully drained."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)

    async def _drain(self) -> None:
        try:
            while self._jobs:
                job = self._jobs.popleft()
                await self._run_job(job)

                if self._jobs:
                    self.logger.info(f"Waiting {self.cooldown_seconds:g} seconds before processing next request. "
                                     f"Queue size: {self.pending}")
                    await asyncio.sleep(self.cooldown_seconds)
        finally:
            self._draining = False

        self.logger.info("Queue is empty. Ready for new requests.")

    async def _run_job(self, job: QueueJob) -> None:
        job.state = JobState.RUNNING
        job.started_at = time.monotonic()

        try:
            result = await self.runner(job.request)
        except Exception as e:
            self.logger.error(f"Error processing {job.request.raw_artist_url}: {e}")
            result = ExtractionFailure(ErrorKind.PROCESSING_ERROR, f"Error processing request: {e}")

        job.finished_at = time.monotonic()
        job.result = result
        job.state = JobState.COMPLETED if result.success else JobState.FAILED

        if not job.completion.done():
            job.completion.set_result(result)
