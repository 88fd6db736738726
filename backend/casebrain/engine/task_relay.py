from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

STRATEGY_TASKS_HEADER = "//-- Tasks from Selected Strategy --//"


class TaskRelay:
    """One-shot handoff of action items from the strategist to the prioritizer.

    ``publish`` replaces whatever is waiting; ``drain_into`` hands the tasks
    over once and empties the relay.
    """

    def __init__(self) -> None:
        self._pending: list[str] = []

    def __bool__(self) -> bool:
        return bool(self._pending)

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def publish(self, tasks: list[str]) -> None:
        if self._pending:
            logger.info("Replacing %d unconsumed strategy tasks", len(self._pending))
        self._pending = list(tasks)

    def drain_into(self, target_text: str) -> str:
        if not self._pending:
            return target_text

        tasks, self._pending = self._pending, []
        block = "\n".join(tasks)
        return f"{target_text}\n\n{STRATEGY_TASKS_HEADER}\n{block}"
