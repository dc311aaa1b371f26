"""
Run independent upstream calls in parallel without letting one failure sink the rest
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettledResult:
    """Outcome of one branch: either a value or the exception it raised"""
    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, fallback: Any) -> Any:
        return self.value if self.error is None else fallback


def run_settled(tasks: dict[str, Callable[[], Any]], max_workers: int = 6) -> dict[str, SettledResult]:
    """Run every task concurrently and wait for all of them.

    Each branch's exception is captured in its ``SettledResult`` and logged;
    it never propagates to the caller or cancels sibling branches.
    """
    if not tasks:
        return {}

    results: dict[str, SettledResult] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(tasks)))) as executor:
        futures = {name: executor.submit(task) for name, task in tasks.items()}
        for name, future in futures.items():
            try:
                results[name] = SettledResult(value=future.result())
            except Exception as e:
                logger.error(f"Parallel branch '{name}' failed: {e}")
                results[name] = SettledResult(error=e)
    return results
