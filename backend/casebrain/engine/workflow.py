from __future__ import annotations

import logging

from ..knowledge.base import CaseProfile
from ..knowledge.store import KnowledgeStore
from .errors import CaseBrainError
from .llm import ModelClient

logger = logging.getLogger(__name__)

INVALID_FORMAT = "The AI may have returned an invalid format."


class Workflow:
    """State shared by every model-backed workflow.

    ``busy`` is for the caller to gate duplicate submissions. Once ``closed``
    is set, results of calls that were still in flight are discarded.
    """

    def __init__(
        self, store: KnowledgeStore, model: ModelClient, profile: CaseProfile
    ) -> None:
        self.store = store
        self.model = model
        self.profile = profile
        self.busy = False
        self.error: str | None = None
        self.failure: str | None = None  # exception class name of the last failure
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def _begin(self) -> None:
        self.busy = True
        self.error = None
        self.failure = None

    def _fail(self, exc: Exception, message: str) -> None:
        logger.error(
            "%s failed: %s",
            type(self).__name__,
            exc,
            exc_info=not isinstance(exc, CaseBrainError),
        )
        if self.closed:
            return
        self.failure = type(exc).__name__
        self.error = message
