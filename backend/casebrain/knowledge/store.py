"""The case knowledge base: facts grouped by the source they came from.

The ordered list of sources (and the ordered facts inside each) is the only
record of what the assistant knows about the case. ``case_context`` is derived
from it on every read, so every workflow sees the same, current snapshot.
"""

from __future__ import annotations

import logging
import uuid

from .base import CaseProfile, Fact, FactSource

logger = logging.getLogger(__name__)

INITIAL_SOURCE_ID = "initial-case-summary"
MANUAL_SOURCE_ID = "manually-added"


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class KnowledgeStore:
    def __init__(self, sources: list[FactSource] | None = None) -> None:
        self._sources: list[FactSource] = list(sources or [])

    @classmethod
    def from_profile(cls, profile: CaseProfile) -> "KnowledgeStore":
        lines = [line.strip() for line in profile.summary.split("\n")]
        initial_facts = [
            Fact(id=f"initial-{i}", text=text)
            for i, text in enumerate(line for line in lines if line)
        ]
        return cls(
            [
                FactSource(
                    id=INITIAL_SOURCE_ID,
                    name="Initial Case Summary",
                    facts=initial_facts,
                ),
                FactSource(id=MANUAL_SOURCE_ID, name="Manually Added Facts"),
            ]
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def sources(self) -> tuple[FactSource, ...]:
        return tuple(self._sources)

    @property
    def case_context(self) -> str:
        return "\n".join(
            fact.text for source in self._sources for fact in source.facts
        )

    @property
    def fact_count(self) -> int:
        return sum(len(source.facts) for source in self._sources)

    def get_source(self, source_id: str) -> FactSource | None:
        for source in self._sources:
            if source.id == source_id:
                return source
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_fact(
        self, text: str, source_id: str = MANUAL_SOURCE_ID
    ) -> Fact | None:
        text = text.strip()
        if not text:
            return None

        source = self.get_source(source_id)
        if source is None:
            logger.warning("add_fact: unknown source %r, fact dropped", source_id)
            return None

        fact = Fact(id=_new_id(source_id), text=text)
        source.facts.append(fact)
        return fact

    def add_fact_source(self, name: str, facts: list[str]) -> FactSource:
        source_id = _new_id("source")
        source = FactSource(
            id=source_id,
            name=name,
            facts=[Fact(id=f"{source_id}-{i}", text=t) for i, t in enumerate(facts)],
        )
        self._sources.append(source)
        logger.info("Added fact source %r with %d facts", name, len(facts))
        return source

    def delete_fact(self, fact_id: str, source_id: str) -> bool:
        source = self.get_source(source_id)
        if source is None:
            return False

        remaining = [fact for fact in source.facts if fact.id != fact_id]
        if len(remaining) == len(source.facts):
            return False

        source.facts = remaining
        return True
