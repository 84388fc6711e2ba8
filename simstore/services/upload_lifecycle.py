from __future__ import annotations

import asyncio
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Callable, Generator, Protocol

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from simstore.domain import upload as transitions
from simstore.domain.upload import UploadConfig, UploadState
from simstore.exceptions.exceptions import UploadCancelledError
from simstore.infrastructure.storage.base import StorageBackend
from simstore.models.enums import UploadPhase
from simstore.schemas.datastore_item import DEFAULT_CONTENT_TYPE, DatastoreItem, build_attributes

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[DatastoreItem], None]


class ScheduledStep(Protocol):
    def cancel(self) -> None: ...


class ChunkScheduler(Protocol):
    """Runs a callback once after a delay and hands back a cancellable handle."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledStep: ...


class LoopScheduler:
    """ChunkScheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledStep:
        return self._loop.call_later(delay, callback)


def build_location_uri(provider_id: str, path: str) -> str:
    scheme = provider_id.replace("_", "-")
    return f"{scheme}://storage/{path}"


def build_upload_id(provider_id: str) -> str:
    return f"{provider_id}_upload_{uuid.uuid4().hex}"


class UploadLifecycle:
    """Drives one upload attempt from start to a terminal phase.

    In fast mode the record and payload are committed while the handle is
    being constructed. In slow mode the payload is "transferred" one chunk per
    scheduler tick, emitting the cumulative byte count on ``progress`` after
    each chunk, and committed once the last chunk lands. ``result`` resolves
    exactly once, with the stored item, with ``UploadCancelledError``, or with
    the storage error when the commit fails.

    The lifecycle closes only the sending side of ``progress``. The receive
    stream belongs to the caller, who closes it when done reading (``async
    with upload.progress:`` or ``upload.progress.close()``).
    """

    def __init__(
        self,
        path: str,
        data: bytes,
        *,
        storage: StorageBackend,
        provider_id: str,
        config: UploadConfig,
        content_type: str | None = None,
        content_encoding: str | None = None,
        content_language: str | None = None,
        cache_control: str | None = None,
        on_complete: CompletionCallback | None = None,
        scheduler: ChunkScheduler | None = None,
    ):
        config.validate()
        loop = asyncio.get_running_loop()

        self.path = path
        self.content_type = content_type
        self.identifier = build_upload_id(provider_id)
        self.item = DatastoreItem(
            location_uri=build_location_uri(provider_id, path),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            upload_timestamp=datetime.now(timezone.utc),
            provider_id=provider_id,
            provider_upload_id=self.identifier,
            attributes=build_attributes(
                content_encoding=content_encoding,
                content_language=content_language,
                cache_control=cache_control,
            ),
        )
        self.result: asyncio.Future[DatastoreItem] = loop.create_future()

        self._data = bytes(data)
        self._storage = storage
        self._config = config
        self._on_complete = on_complete
        self._scheduler = scheduler or LoopScheduler(loop)
        self._pending: ScheduledStep | None = None
        self._state = UploadState(total_bytes=len(self._data))

        send_stream: MemoryObjectSendStream[int]
        receive_stream: MemoryObjectReceiveStream[int]
        send_stream, receive_stream = anyio.create_memory_object_stream(max_buffer_size=math.inf)
        self._progress_send = send_stream
        self.progress = receive_stream

        logger.debug(
            "[upload] start path=%s upload_id=%s bytes=%s slow_mode=%s",
            path,
            self.identifier,
            self._state.total_bytes,
            config.slow_mode,
        )
        if config.slow_mode:
            self._schedule_next_step()
        else:
            self._state = transitions.advance(self._state, self._state.total_bytes)
            self._commit_and_complete(emit_final=True)

    @property
    def phase(self) -> UploadPhase:
        return self._state.phase

    @property
    def bytes_transferred(self) -> int:
        return self._state.bytes_transferred

    @property
    def total_bytes(self) -> int:
        return self._state.total_bytes

    def __await__(self) -> Generator[object, None, DatastoreItem]:
        return self.result.__await__()

    async def wait(self) -> DatastoreItem:
        return await self.result

    def pause(self) -> None:
        if not self._config.slow_mode:
            return
        paused = transitions.pause(self._state)
        if paused is self._state:
            return
        self._state = paused
        self._cancel_pending_step()
        logger.debug("[upload] paused upload_id=%s at=%s", self.identifier, self.bytes_transferred)

    def resume(self) -> None:
        resumed = transitions.resume(self._state)
        if resumed is self._state:
            return
        self._state = resumed
        logger.debug("[upload] resumed upload_id=%s at=%s", self.identifier, self.bytes_transferred)
        self._schedule_next_step()

    def cancel(self) -> None:
        cancelled = transitions.cancel(self._state)
        if cancelled is self._state:
            return
        self._state = cancelled
        self._cancel_pending_step()
        self._progress_send.close()
        if not self.result.done():
            self.result.set_exception(UploadCancelledError(self.path, self.identifier))
        logger.info(
            "[upload] cancelled path=%s upload_id=%s at=%s/%s",
            self.path,
            self.identifier,
            self.bytes_transferred,
            self.total_bytes,
        )

    def _schedule_next_step(self) -> None:
        self._pending = self._scheduler.schedule(self._config.chunk_delay, self._step)

    def _cancel_pending_step(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _step(self) -> None:
        self._pending = None
        if self._state.phase is not UploadPhase.RUNNING:
            return

        self._state = transitions.advance(self._state, self._config.chunk_size)
        self._emit(self._state.bytes_transferred)

        if self._state.is_transfer_done:
            self._commit_and_complete(emit_final=False)
        else:
            self._schedule_next_step()

    def _emit(self, value: int) -> None:
        try:
            self._progress_send.send_nowait(value)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            # Consumer closed its end, or the upload already closed ours.
            pass

    def _commit_and_complete(self, *, emit_final: bool) -> None:
        try:
            self._storage.commit(self.path, self.item, self._data)
        except Exception as exc:
            logger.exception("[upload] commit failed path=%s upload_id=%s", self.path, self.identifier)
            self._state = transitions.fail(self._state)
            self._progress_send.close()
            if not self.result.done():
                self.result.set_exception(exc)
            return

        self._state = transitions.complete(self._state)
        if emit_final:
            self._emit(self.total_bytes)
        self._progress_send.close()

        if self._on_complete is not None:
            try:
                self._on_complete(self.item)
            except Exception:
                logger.exception("[upload] on_complete callback failed upload_id=%s", self.identifier)

        if not self.result.done():
            self.result.set_result(self.item)
        logger.info(
            "[upload] completed path=%s upload_id=%s bytes=%s",
            self.path,
            self.identifier,
            self.total_bytes,
        )
