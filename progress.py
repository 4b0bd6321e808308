"""Progress reporting for conversion jobs.

A ``ProgressRegistry`` maps correlation ids to listening channels. The
orchestrator publishes ``ProgressUpdate`` objects through a
``ProgressReporter`` bound to its job; delivery is best effort and a
channel that fails is dropped without affecting the conversion.
"""

import json
import logging
import queue
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from tqdm import tqdm

logger = logging.getLogger('notion_obsidian_converter.progress')


class Stage:
    """Stage names reported during a conversion."""
    STARTING = 'starting'
    SEARCHING = 'searching'
    RETRIEVING = 'retrieving'
    QUERYING = 'querying'
    CONVERTING = 'converting'
    COMPLETE = 'complete'


@dataclass(frozen=True)
class ProgressUpdate:
    """A single status message for a conversion job."""

    stage: str
    message: str
    progress: int
    current_record: Optional[int] = None
    total_records: Optional[int] = None
    files_created: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form of the update; unset counters are omitted."""
        data: Dict[str, Any] = {
            'stage': self.stage,
            'message': self.message,
            'progress': self.progress
        }
        if self.current_record is not None:
            data['currentRecord'] = self.current_record
        if self.total_records is not None:
            data['totalRecords'] = self.total_records
        if self.files_created is not None:
            data['filesCreated'] = self.files_created
        return data

    def to_event_stream(self) -> str:
        """Render the update as a server-sent event frame."""
        return f"data: {json.dumps(self.to_dict())}\n\n"


class ProgressChannel(ABC):
    """Destination for the progress updates of one job."""

    @abstractmethod
    def send(self, update: ProgressUpdate) -> None:
        """Deliver an update. Raising marks the channel as broken."""

    def close(self) -> None:
        """Release the channel once the job is finished."""


class LoggingProgressChannel(ProgressChannel):
    """Writes every update to the log."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = log or logger
        self.level = level

    def send(self, update: ProgressUpdate) -> None:
        self.logger.log(self.level, f"[{update.progress:3d}%] {update.stage}: {update.message}")


class QueueProgressChannel(ProgressChannel):
    """
    Buffers updates for a consumer in another thread.

    A web layer can drain ``events()`` into a streaming response. Once the
    channel is closed a ``None`` sentinel ends the iteration.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: 'queue.Queue[Optional[ProgressUpdate]]' = queue.Queue(maxsize=maxsize)
        self.closed = False

    def send(self, update: ProgressUpdate) -> None:
        if self.closed:
            raise RuntimeError("Progress channel is closed")
        self._queue.put_nowait(update)

    def close(self) -> None:
        """Enqueue the end sentinel, evicting the oldest update if the queue is full."""
        if self.closed:
            return
        self.closed = True
        while True:
            try:
                self._queue.put_nowait(None)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    pass

    def events(self, timeout: Optional[float] = None) -> Iterator[ProgressUpdate]:
        """Yield updates until the channel is closed."""
        while True:
            update = self._queue.get(timeout=timeout)
            if update is None:
                return
            yield update


class TqdmProgressChannel(ProgressChannel):
    """Shows job progress as a tqdm bar on the terminal."""

    def __init__(self, description: str = "Converting", **tqdm_kwargs):
        self.bar = tqdm(total=100, desc=description, unit='%', **tqdm_kwargs)

    def send(self, update: ProgressUpdate) -> None:
        delta = update.progress - self.bar.n
        if delta > 0:
            self.bar.update(delta)
        self.bar.set_postfix_str(update.stage)

    def close(self) -> None:
        self.bar.close()


def _close_quietly(conversion_id: str, channel: ProgressChannel) -> None:
    try:
        channel.close()
    except Exception as e:
        logger.warning(f"Error closing progress channel for {conversion_id}: {e}")


class ProgressRegistry:
    """Thread-safe mapping of correlation ids to progress channels."""

    def __init__(self):
        self._channels: Dict[str, ProgressChannel] = {}
        self._lock = threading.Lock()

    def register(self, conversion_id: str, channel: ProgressChannel) -> None:
        """Attach a channel; an existing channel for the id is replaced."""
        with self._lock:
            previous = self._channels.get(conversion_id)
            self._channels[conversion_id] = channel
        if previous is not None and previous is not channel:
            _close_quietly(conversion_id, previous)
        logger.debug(f"Registered progress channel for {conversion_id}")

    def unregister(self, conversion_id: str) -> None:
        """Detach and close the channel of a job, if any."""
        with self._lock:
            channel = self._channels.pop(conversion_id, None)
        if channel is not None:
            _close_quietly(conversion_id, channel)
            logger.debug(f"Removed progress channel for {conversion_id}")

    @contextmanager
    def subscribe(self, conversion_id: str, channel: ProgressChannel) -> Iterator[ProgressChannel]:
        """Register a channel for the duration of a ``with`` block."""
        self.register(conversion_id, channel)
        try:
            yield channel
        finally:
            self.unregister(conversion_id)

    def publish(self, conversion_id: Optional[str], update: ProgressUpdate) -> bool:
        """
        Send an update to the channel registered for ``conversion_id``.

        Args:
            conversion_id: Correlation id of the job
            update: Update to deliver

        Returns:
            True if a channel accepted the update
        """
        if conversion_id is None:
            return False
        with self._lock:
            channel = self._channels.get(conversion_id)
        if channel is None:
            return False
        try:
            channel.send(update)
            return True
        except Exception as e:
            logger.error(f"Progress stream error for {conversion_id}: {e}")
            with self._lock:
                if self._channels.get(conversion_id) is channel:
                    del self._channels[conversion_id]
            _close_quietly(conversion_id, channel)
            return False

    def __contains__(self, conversion_id: str) -> bool:
        with self._lock:
            return conversion_id in self._channels

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)


class ProgressReporter:
    """Publishes the updates of one job, keeping the percentage non-decreasing."""

    def __init__(self, registry: Optional[ProgressRegistry], conversion_id: Optional[str]):
        self.registry = registry
        self.conversion_id = conversion_id
        self.last_progress = 0

    @property
    def enabled(self) -> bool:
        return self.registry is not None and self.conversion_id is not None

    def report(self, stage: str, message: str, progress: float, **counters) -> None:
        """
        Publish a status update.

        Args:
            stage: Stage name
            message: Human readable status
            progress: Percentage, clamped to 0-100 and never below the last value
            **counters: current_record, total_records and files_created
        """
        value = max(self.last_progress, min(100, int(round(progress))))
        self.last_progress = value
        if not self.enabled:
            return
        self.registry.publish(
            self.conversion_id,
            ProgressUpdate(stage=stage, message=message, progress=value, **counters)
        )


__all__ = [
    'LoggingProgressChannel',
    'ProgressChannel',
    'ProgressRegistry',
    'ProgressReporter',
    'ProgressUpdate',
    'QueueProgressChannel',
    'Stage',
    'TqdmProgressChannel'
]
