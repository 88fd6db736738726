from __future__ import annotations

from ..knowledge.base import CaseProfile
from ..knowledge.store import KnowledgeStore
from ..schemas import PrioritizedTask
from .errors import MalformedResponse, UpstreamTransportError
from .llm import ModelClient
from .results import parse_json, unwrap
from .task_relay import TaskRelay
from .workflow import INVALID_FORMAT, Workflow

PRIORITIZATION_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "priority": {"type": "integer"},
            "task": {"type": "string"},
            "rationale": {"type": "string"},
        },
        "required": ["priority", "task", "rationale"],
    },
}

PRIORITY_LABELS = {1: "CRITICAL", 2: "HIGH", 3: "MEDIUM"}


def priority_label(priority: int) -> str:
    return PRIORITY_LABELS.get(priority, "NORMAL")


class Prioritizer(Workflow):
    def __init__(
        self,
        store: KnowledgeStore,
        model: ModelClient,
        profile: CaseProfile,
        relay: TaskRelay,
    ) -> None:
        super().__init__(store, model, profile)
        self.relay = relay
        self.tasks = profile.default_tasks
        self.goals = profile.default_goals
        self.prioritized_tasks: list[PrioritizedTask] = []

    def sync(self) -> None:
        """Pull in action items published by the strategist, once."""
        self.tasks = self.relay.drain_into(self.tasks)

    async def prioritize(self) -> list[PrioritizedTask]:
        self.sync()
        self._begin()
        self.prioritized_tasks = []

        prompt = self._build_prompt(self.store.case_context)
        try:
            raw = await self.model.generate_structured(prompt, PRIORITIZATION_SCHEMA)
            ranked = unwrap(parse_json(raw, list[PrioritizedTask]))
        except UpstreamTransportError as exc:
            self._fail(exc, "Failed to get prioritization. Please try again.")
            return []
        except MalformedResponse as exc:
            self._fail(exc, f"Failed to get prioritization. {INVALID_FORMAT}")
            return []
        except Exception as exc:
            self._fail(exc, "Failed to get prioritization. Please try again.")
            return []
        finally:
            self.busy = False

        if self.closed:
            return []
        self.prioritized_tasks = ranked
        return ranked

    def _build_prompt(self, case_context: str) -> str:
        p = self.profile
        return (
            f"You are an expert legal strategist specializing in the {p.court}.\n"
            f"Your client is {p.litigant} in the case {p.case_name} ({p.file_number}).\n"
            "You MUST act with the logic and rationality of a seasoned barrister. "
            "Your advice MUST be grounded in the applicable law.\n\n"
            "**Case Context:**\n"
            f"{case_context}\n\n"
            "**Client's Stated Goals:**\n"
            f"{self.goals}\n\n"
            "**Client's Immediate Task List:**\n"
            f"{self.tasks}\n\n"
            "Based on all the provided information, your task is to prioritize the "
            "client's immediate tasks. Your prioritization MUST be guided by:\n"
            f"1. The {p.legislation}, with the child's best interests (s 60CC) as the "
            "paramount consideration.\n"
            f"2. The {p.court} rules for procedural correctness.\n"
            f"3. The {p.court} practice directions for case management principles.\n"
            "4. The immediate need to address any unacceptable risk of harm to the children.\n\n"
            "Return your response as a valid JSON array of objects. Each object must "
            "have the following keys:\n"
            '1. "priority": A number representing the rank (1 is the highest).\n'
            '2. "task": The task string from the user\'s input.\n'
            '3. "rationale": A concise, expert explanation for why the task is given '
            "that priority, citing case strategy and court principles.\n\n"
            "Do not include any text outside of the JSON array."
        )
