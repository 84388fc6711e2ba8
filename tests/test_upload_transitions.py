import pytest

from simstore.domain import upload as transitions
from simstore.domain.upload import UploadConfig, UploadState
from simstore.exceptions.exceptions import ValidationError
from simstore.models.enums import UploadPhase


def test_advance_moves_by_chunk_and_clamps_at_total():
    state = UploadState(total_bytes=250)

    state = transitions.advance(state, 100)
    assert state.bytes_transferred == 100
    state = transitions.advance(state, 100)
    assert state.bytes_transferred == 200
    assert not state.is_transfer_done
    state = transitions.advance(state, 100)
    assert state.bytes_transferred == 250
    assert state.is_transfer_done


def test_advance_is_a_no_op_unless_running():
    paused = UploadState(total_bytes=10, bytes_transferred=3, phase=UploadPhase.PAUSED)
    cancelled = UploadState(total_bytes=10, bytes_transferred=3, phase=UploadPhase.CANCELLED)

    assert transitions.advance(paused, 5) is paused
    assert transitions.advance(cancelled, 5) is cancelled


def test_empty_payload_is_done_immediately():
    state = transitions.advance(UploadState(total_bytes=0), 100)
    assert state.bytes_transferred == 0
    assert state.is_transfer_done
    assert transitions.complete(state).phase is UploadPhase.COMPLETED


def test_complete_requires_full_transfer():
    partial = UploadState(total_bytes=10, bytes_transferred=5)
    assert transitions.complete(partial) is partial

    done = UploadState(total_bytes=10, bytes_transferred=10)
    assert transitions.complete(done).phase is UploadPhase.COMPLETED


def test_pause_resume_round_trip_keeps_progress():
    state = UploadState(total_bytes=10, bytes_transferred=4)

    paused = transitions.pause(state)
    assert paused.phase is UploadPhase.PAUSED
    assert transitions.pause(paused) is paused

    resumed = transitions.resume(paused)
    assert resumed.phase is UploadPhase.RUNNING
    assert resumed.bytes_transferred == 4
    assert transitions.resume(resumed) is resumed


@pytest.mark.parametrize("phase", [UploadPhase.RUNNING, UploadPhase.PAUSED])
def test_cancel_from_live_phases(phase):
    state = UploadState(total_bytes=10, phase=phase)
    assert transitions.cancel(state).phase is UploadPhase.CANCELLED


@pytest.mark.parametrize("phase", [UploadPhase.CANCELLED, UploadPhase.COMPLETED, UploadPhase.FAILED])
def test_terminal_phases_never_change(phase):
    state = UploadState(total_bytes=10, bytes_transferred=10, phase=phase)

    assert phase.is_terminal
    assert transitions.cancel(state) is state
    assert transitions.fail(state) is state
    assert transitions.pause(state) is state
    assert transitions.resume(state) is state
    assert transitions.complete(state) is state


def test_fail_only_from_running():
    running = UploadState(total_bytes=10, bytes_transferred=10)
    paused = UploadState(total_bytes=10, bytes_transferred=4, phase=UploadPhase.PAUSED)

    failed = transitions.fail(running)
    assert failed.phase is UploadPhase.FAILED
    assert failed.bytes_transferred == 10
    assert transitions.fail(paused) is paused


@pytest.mark.parametrize(
    "config",
    [
        UploadConfig(chunk_size=0),
        UploadConfig(chunk_size=-5),
        UploadConfig(chunk_delay=-0.1),
    ],
)
def test_invalid_upload_config(config):
    with pytest.raises(ValidationError):
        config.validate()
