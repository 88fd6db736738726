from __future__ import annotations

import logging

from ..knowledge.base import CaseProfile
from ..knowledge.store import KnowledgeStore
from ..schemas import StrategicPathway
from .errors import InputRejected, MalformedResponse, UpstreamTransportError
from .llm import ModelClient
from .results import parse_json, unwrap
from .task_relay import TaskRelay
from .workflow import INVALID_FORMAT, Workflow

logger = logging.getLogger(__name__)

_STEP_SCHEMA = {
    "type": "object",
    "properties": {
        "step": {"type": "number"},
        "action": {"type": "string"},
        "description": {"type": "string"},
    },
    "required": ["step", "action", "description"],
}

STRATEGY_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "description": {"type": "string"},
            "steps": {"type": "array", "items": _STEP_SCHEMA},
            "evidenceNeeded": {"type": "array", "items": {"type": "string"}},
            "risks": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["title", "description", "steps", "evidenceNeeded", "risks"],
    },
}


class Strategist(Workflow):
    def __init__(
        self,
        store: KnowledgeStore,
        model: ModelClient,
        profile: CaseProfile,
        relay: TaskRelay,
    ) -> None:
        super().__init__(store, model, profile)
        self.relay = relay
        self.goal = profile.default_strategy_goal
        self.pathways: list[StrategicPathway] = []

    async def generate(self) -> list[StrategicPathway]:
        self._begin()
        self.pathways = []

        prompt = self._build_prompt(self.store.case_context)
        try:
            raw = await self.model.generate_structured(prompt, STRATEGY_SCHEMA)
            pathways = unwrap(parse_json(raw, list[StrategicPathway]))
        except UpstreamTransportError as exc:
            self._fail(exc, "Failed to generate strategies. Please try again.")
            return []
        except MalformedResponse as exc:
            self._fail(exc, f"Failed to generate strategies. {INVALID_FORMAT}")
            return []
        except Exception as exc:
            self._fail(exc, "Failed to generate strategies. Please try again.")
            return []
        finally:
            self.busy = False

        if self.closed:
            return []
        self.pathways = pathways
        return pathways

    def select(self, index: int) -> list[str]:
        """Send the chosen pathway's actions to the prioritizer."""
        if not 0 <= index < len(self.pathways):
            raise InputRejected(f"No strategic pathway at position {index}")

        tasks = [step.action for step in self.pathways[index].steps]
        self.relay.publish(tasks)
        logger.info("Published %d tasks from %r", len(tasks), self.pathways[index].title)
        return tasks

    def _build_prompt(self, case_context: str) -> str:
        p = self.profile
        return (
            f"You are an elite legal strategist AI, specializing in high-conflict {p.court} "
            f"matters. Your client is {p.litigant} in {p.case_name} ({p.file_number}). "
            "You are to act with the logic, foresight, and pragmatism of a top-tier "
            "Senior Counsel.\n\n"
            "**Case Context:**\n"
            f"{case_context}\n\n"
            "**Client's Overarching Goal:**\n"
            f"{self.goal}\n\n"
            "Based on the provided context and the client's goal, generate 2-3 distinct, "
            "actionable strategic pathways. Each pathway must be a complete, self-contained "
            f"strategy that is legally sound and compliant with the {p.court} rules. Each "
            "step should be a valid legal or procedural action. For each pathway, provide:\n\n"
            "1. A clear, concise title.\n"
            "2. A brief description of the strategy's core logic.\n"
            "3. A sequence of concrete, actionable steps.\n"
            "4. A list of key evidence required to support the strategy.\n"
            "5. An analysis of potential risks or counter-arguments from the opposing party.\n\n"
            "Return your response as a valid JSON array of objects. Do not include any "
            "text outside of the JSON array. Each object in the array must represent one "
            'strategic pathway and have the following keys: "title", "description", '
            '"steps" (an array of objects with "step", "action", "description"), '
            '"evidenceNeeded" (an array of strings), and "risks" (an array of strings).'
        )
