"""Tests for run state."""

from collections import deque

from sequence_runner.work import RunError, RunPhase, RunState, WorkItem


class TestRunState:
    """Tests for RunState."""

    def test_defaults(self):
        """Test a fresh state is empty and consistent."""
        state = RunState()
        assert state.phase == RunPhase.INITIALIZED
        assert state.current is None
        assert state.all_items() == []
        assert state.is_consistent()

    def test_copy_is_independent(self):
        """Test copies share items but not containers."""
        a, b = WorkItem(name="a"), WorkItem(name="b")
        state = RunState(total=2, remaining=2, pending=deque([a, b]))
        snapshot = state.copy()

        state.pending.popleft()
        state.completed.append(a)
        state.errors.append(RunError("boom", a))

        assert list(snapshot.pending) == [a, b]
        assert snapshot.completed == []
        assert snapshot.errors == []
        assert snapshot.pending[0] is a

    def test_all_items(self):
        """Test every partition is included once."""
        items = [WorkItem(name=n) for n in "abcd"]
        state = RunState(
            pending=deque([items[0]]),
            current=items[1],
            completed=[items[2]],
            skipped=[items[3]],
        )
        assert set(map(id, state.all_items())) == set(map(id, items))
        assert len(state.all_items()) == 4

    def test_is_consistent(self):
        """Test the counter check."""
        assert RunState(total=3, processed=1, remaining=2).is_consistent()
        assert not RunState(total=3, processed=1, remaining=1).is_consistent()


class TestRunError:
    """Tests for RunError."""

    def test_item_optional(self):
        error = RunError("Delegate hide error: nope")
        assert error.item is None
        assert "hide" in error.message
