from dataclasses import dataclass, field


@dataclass(frozen=True)
class Fact:
    id: str
    text: str


@dataclass
class FactSource:
    id: str
    name: str
    facts: list[Fact] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentInfo:
    id: str
    name: str
    content: str


@dataclass
class CaseProfile:
    key: str
    case_name: str
    file_number: str
    litigant: str
    court: str  # short name used in prompts, e.g. "FCFCOA"
    legislation: str
    summary: str  # one fact per non-empty line
    documents: list[DocumentInfo] = field(default_factory=list)
    default_tasks: str = ""
    default_goals: str = ""
    default_strategy_goal: str = ""
