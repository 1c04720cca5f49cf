import pytest

from studio.core.errors import BadRequestError, ConflictError
from studio.task_registry import RECORD_TTL_MS, TASK_TIMEOUT_MS, TaskRegistry


class FakeClock:
    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def registry(clock: FakeClock) -> TaskRegistry:
    return TaskRegistry(clock=clock)


def test_start_records_running_task(registry, clock):
    result = registry.start("t1", "s1")

    assert result["success"] is True
    assert result["record"] == {
        "taskId": "t1",
        "sessionId": "s1",
        "status": "running",
        "startedAt": clock.now,
    }
    assert registry.get("t1")["isStale"] is False


def test_start_requires_session():
    with pytest.raises(BadRequestError):
        TaskRegistry().start("t1", None)


def test_second_task_in_session_conflicts(registry):
    registry.start("t1", "s1")

    with pytest.raises(ConflictError) as exc_info:
        registry.start("t2", "s1")

    assert exc_info.value.extra["runningTask"]["taskId"] == "t1"
    assert registry.start("t3", "other-session")["success"] is True


def test_stale_task_is_superseded(registry, clock):
    registry.start("t1", "s1")
    clock.advance(TASK_TIMEOUT_MS + 1)

    assert registry.get("t1")["isStale"] is True
    result = registry.start("t2", "s1")

    assert result["record"]["taskId"] == "t2"
    old = registry.get("t1")
    assert old["status"] == "failed"
    assert old["completedAt"] == clock.now


def test_heartbeat_keeps_task_fresh(registry, clock):
    registry.start("t1", "s1")
    clock.advance(TASK_TIMEOUT_MS - 1000)
    assert registry.heartbeat("t1")["success"] is True
    clock.advance(5000)

    with pytest.raises(ConflictError):
        registry.start("t2", "s1")


def test_heartbeat_on_finished_task_fails(registry):
    registry.start("t1", "s1")
    registry.complete("t1")

    assert registry.heartbeat("t1") == {"success": False, "error": "Task not found or not running"}
    assert registry.heartbeat("missing")["success"] is False


def test_complete_untracked_task(registry):
    result = registry.complete("ghost", status="failed")

    assert result["wasUntracked"] is True
    assert result["record"]["status"] == "failed"
    assert result["record"]["sessionId"] == "unknown"


def test_complete_frees_session(registry):
    registry.start("t1", "s1")
    result = registry.complete("t1", status="completed")

    assert result["record"]["status"] == "completed"
    assert "wasUntracked" not in result
    assert registry.start("t2", "s1")["success"] is True


def test_records_expire_after_an_hour(registry, clock):
    registry.start("t1", "s1")
    clock.advance(RECORD_TTL_MS + 1)

    assert registry.get("t1") == {"found": False, "taskId": "t1"}
    assert registry.counts()["totalTasks"] == 0


def test_counts_and_clear(registry):
    registry.start("t1", "s1")
    registry.complete("t1")
    registry.start("t2", "s1")
    registry.start("t3", "s2")

    assert registry.counts() == {"totalTasks": 3, "running": 2, "completed": 1, "failed": 0}
    assert registry.clear("s1") == {"success": True, "cleared": 2}
    assert [t["taskId"] for t in registry.by_session("s2")["tasks"]] == ["t3"]


def test_apply_rejects_unknown_action(registry):
    with pytest.raises(BadRequestError, match="Invalid action"):
        registry.apply("explode", "t1", "s1")
