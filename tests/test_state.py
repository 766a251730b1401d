"""Tests for the persisted run state."""

from pathlib import Path

from terminal_env.state import RunState, StepRecord, StepStatus


def test_record_transitions() -> None:
    rec = StepRecord("core")
    rec.start()
    assert rec.status == StepStatus.IN_PROGRESS
    assert rec.started is not None
    rec.finish(StepStatus.FAILED, "boom")
    assert rec.as_row() == {"name": "core", "status": "failed", "message": "boom"}


def test_save_and_load(tmp_path: Path) -> None:
    state = RunState(os_name="Linux", languages={"python": True, "node": False})
    state.record("core").finish(StepStatus.SUCCESS)
    state.record("python").finish(StepStatus.FAILED, "pip broke")
    path = tmp_path / "state.json"
    state.save(path)

    loaded = RunState.load(path)
    assert loaded is not None
    assert loaded.languages == {"python": True, "node": False}
    assert loaded.status_of("core") == StepStatus.SUCCESS
    assert loaded.failed_steps() == ["python"]
    assert loaded.status_of("ruby") == StepStatus.PENDING


def test_record_returns_existing_entry() -> None:
    state = RunState()
    first = state.record("core")
    assert state.record("core") is first
    assert len(state.steps) == 1


def test_load_missing_or_corrupt(tmp_path: Path) -> None:
    assert RunState.load(tmp_path / "missing.json") is None
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert RunState.load(bad) is None
