from __future__ import annotations

import logging

from ..knowledge import CASE_PROFILES
from ..knowledge.base import CaseProfile
from ..knowledge.store import KnowledgeStore
from .chat_session import ChatSessionManager
from .document_analyzer import DocumentAnalyzer
from .llm import ModelClient
from .prioritizer import Prioritizer
from .strategist import Strategist
from .task_relay import TaskRelay
from .transcriber import SessionFactory, Transcriber

logger = logging.getLogger(__name__)


class CaseWorkspace:
    """Everything one litigant works with during an application run.

    Created at startup and closed at shutdown. Every workflow receives the
    same store (and relay) here, at construction.
    """

    def __init__(
        self,
        profile: CaseProfile,
        model: ModelClient,
        connect_transcription: SessionFactory,
    ) -> None:
        self.profile = profile
        self.store = KnowledgeStore.from_profile(profile)
        self.relay = TaskRelay()

        self.chat = ChatSessionManager(self.store, model, profile)
        self.prioritizer = Prioritizer(self.store, model, profile, self.relay)
        self.strategist = Strategist(self.store, model, profile, self.relay)
        self.documents = DocumentAnalyzer(self.store, model, profile)
        self.transcriber = Transcriber(connect_transcription)
        self.closed = False

        logger.info(
            "Workspace for %s created with %d facts", profile.case_name, self.store.fact_count
        )

    @classmethod
    def for_profile(
        cls, key: str, model: ModelClient, connect_transcription: SessionFactory
    ) -> "CaseWorkspace":
        profile = CASE_PROFILES.get(key)
        if profile is None:
            raise KeyError(f"Unknown case profile {key!r}")
        return cls(profile, model, connect_transcription)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.chat.close()
        self.prioritizer.close()
        self.strategist.close()
        self.documents.close()
        await self.transcriber.close()
        logger.info("Workspace for %s closed", self.profile.case_name)
