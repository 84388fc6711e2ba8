from __future__ import annotations

from dataclasses import dataclass, replace

from simstore.exceptions.exceptions import ValidationError
from simstore.models.enums import UploadPhase

DEFAULT_CHUNK_DELAY_SECONDS = 0.1
DEFAULT_CHUNK_SIZE_BYTES = 1024


@dataclass(frozen=True)
class UploadConfig:
    slow_mode: bool = False
    chunk_delay: float = DEFAULT_CHUNK_DELAY_SECONDS
    chunk_size: int = DEFAULT_CHUNK_SIZE_BYTES

    def validate(self) -> None:
        if self.chunk_size <= 0:
            raise ValidationError("Upload chunk size must be positive")
        if self.chunk_delay < 0:
            raise ValidationError("Upload chunk delay must not be negative")


@dataclass(frozen=True)
class UploadState:
    """Snapshot of one upload attempt. Transitions return new snapshots."""

    total_bytes: int
    bytes_transferred: int = 0
    phase: UploadPhase = UploadPhase.RUNNING

    @property
    def is_transfer_done(self) -> bool:
        return self.bytes_transferred >= self.total_bytes


def advance(state: UploadState, chunk_size: int) -> UploadState:
    """Move one chunk forward. Only a running upload makes progress."""
    if state.phase is not UploadPhase.RUNNING:
        return state
    remaining = state.total_bytes - state.bytes_transferred
    return replace(state, bytes_transferred=state.bytes_transferred + min(chunk_size, remaining))


def complete(state: UploadState) -> UploadState:
    if state.phase is not UploadPhase.RUNNING or not state.is_transfer_done:
        return state
    return replace(state, bytes_transferred=state.total_bytes, phase=UploadPhase.COMPLETED)


def pause(state: UploadState) -> UploadState:
    if state.phase is not UploadPhase.RUNNING:
        return state
    return replace(state, phase=UploadPhase.PAUSED)


def resume(state: UploadState) -> UploadState:
    if state.phase is not UploadPhase.PAUSED:
        return state
    return replace(state, phase=UploadPhase.RUNNING)


def cancel(state: UploadState) -> UploadState:
    if state.phase.is_terminal:
        return state
    return replace(state, phase=UploadPhase.CANCELLED)


def fail(state: UploadState) -> UploadState:
    """A running upload whose commit raised ends here and never restarts."""
    if state.phase is not UploadPhase.RUNNING:
        return state
    return replace(state, phase=UploadPhase.FAILED)
