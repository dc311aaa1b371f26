"""Unit tests for the partial-failure parallel join."""

from analyzerr.utils.concurrency import SettledResult, run_settled


class TestRunSettled:
    """Tests for run_settled."""

    def test_collects_every_value(self):
        results = run_settled({"a": lambda: 1, "b": lambda: 2})
        assert results["a"].value == 1
        assert results["b"].value == 2

    def test_failing_branch_does_not_affect_others(self):
        def boom():
            raise RuntimeError("upstream down")

        results = run_settled({"ok": lambda: "fine", "bad": boom})

        assert results["ok"].ok
        assert results["ok"].value == "fine"
        assert not results["bad"].ok
        assert isinstance(results["bad"].error, RuntimeError)

    def test_empty_task_set(self):
        assert run_settled({}) == {}


class TestSettledResult:
    def test_value_or_uses_fallback_on_error(self):
        assert SettledResult(error=ValueError("x")).value_or([]) == []

    def test_value_or_keeps_value(self):
        assert SettledResult(value=0).value_or(5) == 0
