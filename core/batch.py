"""
Instant Film — Batch Coordinator

Fans a set of input files out to independent pipeline runs on the asyncio
loop (CPU work goes to the default executor), collects successes into the
current Batch and reports completion once every file has settled.

Each submission starts a new batch generation. Results that finish after a
newer submission has started belong to an abandoned batch and are dropped
instead of leaking into the fresh one.

Callbacks (both optional, plain callables):
    on_result(data: bytes, filename: str)  — once per appended result
    on_complete(succeeded: int)            — once per batch, after all files settle
"""

import asyncio
import functools
import logging
import threading
from dataclasses import dataclass

from core.archive import pack, ARCHIVE_FILENAME
from core.models import ProcessingRequest, ProcessedResult
from core.pipeline import process, DecodeError, EncodeError
from core.resample import InvalidDimensions


@dataclass(frozen=True)
class BatchSummary:
    generation: int
    submitted: int
    succeeded: int
    failed: int


class Batch:
    """Insertion-ordered results of the current submission.

    All mutations go through append/remove/reset under one lock, so results
    arriving from concurrently finishing files never interleave with a
    reset from a new submission.
    """

    def __init__(self):
        self._entries: list[ProcessedResult] = []
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def reset(self) -> int:
        """Empty the batch and start a new generation. Returns the new generation."""
        with self._lock:
            self._entries.clear()
            self._generation += 1
            return self._generation

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def append(self, result: ProcessedResult, generation: int) -> bool:
        """Append if generation is still current. Returns False for stale results."""
        with self._lock:
            if generation != self._generation:
                return False
            self._entries.append(result)
            return True

    def remove(self, filename: str) -> bool:
        """Remove the first entry with this filename. Missing names are a no-op."""
        with self._lock:
            for i, entry in enumerate(self._entries):
                if entry.filename == filename:
                    del self._entries[i]
                    return True
            return False

    def remove_id(self, result_id: str) -> bool:
        with self._lock:
            for i, entry in enumerate(self._entries):
                if entry.result_id == result_id:
                    del self._entries[i]
                    return True
            return False

    def find(self, key: str):
        """Look up by result id first, then by first matching filename."""
        with self._lock:
            for entry in self._entries:
                if entry.result_id == key:
                    return entry
            for entry in self._entries:
                if entry.filename == key:
                    return entry
            return None

    def snapshot(self) -> list[ProcessedResult]:
        with self._lock:
            return list(self._entries)

    def __len__(self):
        with self._lock:
            return len(self._entries)


class BatchHandle:
    """Returned by submit(); await wait() for the batch summary."""

    def __init__(self, generation: int, submitted: int, task=None):
        self.generation = generation
        self.submitted = submitted
        self._task = task

    @property
    def task(self):
        """The running batch task, or None for an empty submission."""
        return self._task

    def done(self) -> bool:
        return self._task is None or self._task.done()

    async def wait(self) -> BatchSummary:
        if self._task is None:
            return BatchSummary(self.generation, 0, 0, 0)
        return await self._task


class BatchCoordinator:
    """Owns the Batch and drives one pipeline run per submitted file.

    Args:
        on_result: Called with (png_bytes, filename) for each appended result.
        on_complete: Called with the success count when a batch settles.
        monochrome: Initial toggle. Read again as each file starts, so
                    flipping it mid-batch can produce a mixed batch.
        rng: Random source for the effect stack (shared default if None).
    """

    def __init__(self, on_result=None, on_complete=None, monochrome: bool = False, rng=None):
        self.batch = Batch()
        self.on_result = on_result
        self.on_complete = on_complete
        self.monochrome = monochrome
        self._rng = rng
        self._processing = False

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def can_download(self) -> bool:
        return not self._processing and len(self.batch) > 0

    # --- Submission -------------------------------------------------------

    def submit(self, files) -> BatchHandle:
        """Start processing (filename, bytes) pairs. Must be called on a running loop.

        An empty submission does nothing: the current batch is left alone and
        no notifications fire.
        """
        files = list(files)
        if not files:
            return BatchHandle(self.batch.generation, 0)

        loop = asyncio.get_running_loop()
        generation = self.batch.reset()
        self._processing = True
        task = loop.create_task(self._run(generation, files))
        return BatchHandle(generation, len(files), task)

    async def run(self, files) -> BatchSummary:
        """Submit and wait for the batch to settle."""
        return await self.submit(files).wait()

    async def _run(self, generation: int, files) -> BatchSummary:
        units = [self._process_one(generation, name, data) for name, data in files]
        outcomes = await asyncio.gather(*units, return_exceptions=True)

        succeeded = sum(1 for o in outcomes if o is True)
        fatal = None
        for (name, _), outcome in zip(files, outcomes):
            if isinstance(outcome, InvalidDimensions):
                fatal = fatal or outcome
            elif isinstance(outcome, BaseException):
                logging.error("Processing %s failed", name, exc_info=outcome)

        if self.batch.generation == generation:
            self._processing = False
            self._emit(self.on_complete, succeeded)
        else:
            logging.debug("Batch %d settled after being superseded", generation)

        if fatal is not None:
            raise fatal
        return BatchSummary(generation, len(files), succeeded, len(files) - succeeded)

    async def _process_one(self, generation: int, filename: str, data: bytes) -> bool:
        request = ProcessingRequest(filename, bytes(data), monochrome=bool(self.monochrome))
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, functools.partial(process, request, self._rng))
        except (DecodeError, EncodeError) as e:
            logging.warning("Skipping %s: %s", filename, e)
            return False

        if not self.batch.append(result, generation):
            logging.debug("Dropping %s from superseded batch %d", result.filename, generation)
            return False
        self._emit(self.on_result, result.data, result.filename)
        return True

    @staticmethod
    def _emit(callback, *args):
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logging.exception("Notification callback failed")

    # --- Commands ---------------------------------------------------------

    def results(self) -> list[ProcessedResult]:
        return self.batch.snapshot()

    def get(self, key: str):
        """Result by id (or first by filename), or None."""
        return self.batch.find(key)

    def remove(self, filename: str) -> bool:
        """Remove the first result with this filename. Safe for missing names."""
        return self.batch.remove(filename)

    def remove_result(self, result_id: str) -> bool:
        return self.batch.remove_id(result_id)

    def clear(self) -> None:
        self.batch.clear()

    def download_one(self, key: str):
        """(png_bytes, filename) for a present result, else None."""
        entry = self.get(key)
        if entry is None:
            return None
        return entry.data, entry.filename

    def download_archive(self):
        """(zip_bytes, 'instant-film-photos.zip'), or None when the batch is empty.

        Raises:
            PackagingError: Archive creation failed; the batch is untouched.
        """
        entries = self.batch.snapshot()
        if not entries:
            return None
        return pack(entries), ARCHIVE_FILENAME
