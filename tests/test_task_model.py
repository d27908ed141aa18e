# ============================================================================
# TASK MODEL TESTS
# ============================================================================
# STATUS: Tests - Task record lifecycle
# PURPOSE: Verify defaults, finalization rules and serialization
# CREATED: 19 OCT 2026
# ============================================================================
"""
Task Model Tests

Run with:
    pytest tests/test_task_model.py -v
"""

import pytest

from core.contracts import StatusCode, StatusSnapshot
from core.models import Task, TaskAlreadyFinalizedError


class TestTaskDefaults:

    def test_new_task_is_unset(self):
        request = {"action": "abc"}
        task = Task(request=request)

        assert task.status == StatusCode.UNSET
        assert task.status == 0
        assert task.response is None
        assert task.error is None
        assert task.finished_at is None
        assert task.is_finalized is False
        assert task.duration_ms is None

    def test_request_held_by_reference(self):
        request = {"action": "abc", "items": [1]}
        task = Task(request=request)

        assert task.request is request

    def test_task_ids_are_unique(self):
        ids = {Task(request=None).task_id for _ in range(50)}

        assert len(ids) == 50


class TestFinalize:

    def test_fills_ok_when_unset(self):
        task = Task(request=None).finalize("done")

        assert task.status == StatusCode.OK
        assert task.response == "done"
        assert task.is_finalized
        assert task.duration_ms >= 0

    def test_keeps_explicit_status(self):
        task = Task(request=None)
        task.set_status("custom")

        task.finalize(None)

        assert task.status == "custom"

    def test_keeps_error_status(self):
        err = RuntimeError("x")
        task = Task(request=None)
        task.set_status(StatusCode.HANDLER_ERROR, err)

        task.finalize(None)

        assert task.status == 500
        assert task.error is err

    def test_second_finalize_raises(self):
        task = Task(request=None).finalize(1)

        with pytest.raises(TaskAlreadyFinalizedError):
            task.finalize(2)
        assert task.response == 1


class TestStatus:

    def test_set_status_resets_error(self):
        task = Task(request=None)
        task.set_status(500, ValueError("x"))
        task.set_status(201)

        assert task.status_snapshot() == StatusSnapshot(201, None)

    def test_snapshot_is_a_copy(self):
        task = Task(request=None)
        snapshot = task.status_snapshot()
        task.set_status(1)

        assert snapshot.status == 0

    def test_error_codes(self):
        assert StatusCode.NOT_FOUND.is_error()
        assert StatusCode.HANDLER_ERROR.is_error()
        assert not StatusCode.OK.is_error()


class TestToDict:

    def test_summary_fields(self):
        task = Task(request={"action": "abc"})
        task.set_status(500, ValueError("bad"))
        task.finalize("r")

        data = task.to_dict()

        assert data["task_id"] == task.task_id
        assert data["status"] == 500
        assert data["error"] == "ValueError('bad')"
        assert data["request"] == "{'action': 'abc'}"
        assert data["response"] == "'r'"
        assert data["finished_at"] is not None

    def test_unfinished_summary(self):
        data = Task(request=None).to_dict()

        assert data["finished_at"] is None
        assert data["duration_ms"] is None
        assert data["status"] == 0
        assert data["error"] is None
