from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import anyio
import pytest

from simstore.domain.upload import UploadConfig
from simstore.services.datastore_service import build_file_datastore, build_memory_datastore


@dataclass
class ManualStep:
    delay: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Collects scheduled chunk steps so tests fire them one at a time."""

    def __init__(self) -> None:
        self.steps: list[ManualStep] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ManualStep:
        step = ManualStep(delay=delay, callback=callback)
        self.steps.append(step)
        return step

    @property
    def pending(self) -> list[ManualStep]:
        return [step for step in self.steps if not step.cancelled and not step.fired]

    def run_next(self) -> None:
        step = self.pending[0]
        step.fired = True
        step.callback()

    def run_all(self) -> None:
        while self.pending:
            self.run_next()


def drain_progress(stream) -> list[int]:
    """Read every progress value already buffered without waiting for more.

    The stream is closed once it reports end of stream.
    """
    values: list[int] = []
    while True:
        try:
            values.append(stream.receive_nowait())
        except anyio.WouldBlock:
            return values
        except anyio.EndOfStream:
            stream.close()
            return values


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def slow_config() -> UploadConfig:
    return UploadConfig(slow_mode=True, chunk_delay=0.05, chunk_size=100)


@pytest.fixture(params=["memory", "file"])
def datastore(request, tmp_path):
    if request.param == "memory":
        return build_memory_datastore("test")
    return build_file_datastore(tmp_path / "store")


@pytest.fixture(params=["memory", "file"])
def slow_datastore(request, tmp_path, manual_scheduler, slow_config):
    if request.param == "memory":
        return build_memory_datastore("slow", upload_config=slow_config, scheduler=manual_scheduler)
    return build_file_datastore(tmp_path / "store", upload_config=slow_config, scheduler=manual_scheduler)


@pytest.fixture
def progress_reader():
    return drain_progress
