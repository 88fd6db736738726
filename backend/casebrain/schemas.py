from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


# ----------------------------------------------------------------------
# Structured model output
# ----------------------------------------------------------------------


class PrioritizedTask(BaseModel):
    priority: int
    task: str
    rationale: str


class StrategyStep(BaseModel):
    step: int
    action: str
    description: str


class StrategicPathway(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    steps: list[StrategyStep]
    evidence_needed: list[str] = Field(alias="evidenceNeeded")
    risks: list[str]


# ----------------------------------------------------------------------
# Knowledge base
# ----------------------------------------------------------------------


class FactOut(BaseModel):
    id: str
    text: str


class FactSourceOut(BaseModel):
    id: str
    name: str
    facts: list[FactOut]


class KnowledgeResponse(BaseModel):
    sources: list[FactSourceOut]
    case_context: str
    fact_count: int


class AddFactRequest(BaseModel):
    text: str
    source_id: Optional[str] = None


# ----------------------------------------------------------------------
# Chat
# ----------------------------------------------------------------------


class ChatMessageOut(BaseModel):
    role: str  # "user" or "model"
    text: str


class ChatStateResponse(BaseModel):
    state: str
    busy: bool
    history: list[ChatMessageOut]


class ChatMessageRequest(BaseModel):
    message: str


# ----------------------------------------------------------------------
# Prioritizer
# ----------------------------------------------------------------------


class PrioritizedTaskOut(PrioritizedTask):
    label: str


class PrioritizerResponse(BaseModel):
    tasks: str
    goals: str
    prioritized_tasks: list[PrioritizedTaskOut]
    busy: bool
    error: Optional[str] = None


class PrioritizerUpdate(BaseModel):
    tasks: Optional[str] = None
    goals: Optional[str] = None


# ----------------------------------------------------------------------
# Strategy
# ----------------------------------------------------------------------


class StrategyResponse(BaseModel):
    goal: str
    pathways: list[StrategicPathway]
    busy: bool
    error: Optional[str] = None


class StrategyRequest(BaseModel):
    goal: Optional[str] = None


class StrategySelectResponse(BaseModel):
    message: str
    tasks: list[str]


# ----------------------------------------------------------------------
# Documents
# ----------------------------------------------------------------------


class DocumentOut(BaseModel):
    id: str
    name: str


class DocumentsResponse(BaseModel):
    documents: list[DocumentOut]
    selected_document_id: Optional[str] = None
    pending_image: Optional[str] = None
    extracted_facts: list[str]
    busy: bool
    error: Optional[str] = None


class IncorporateResponse(BaseModel):
    message: str
    source: Optional[FactSourceOut] = None
