from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from ..knowledge.base import CaseProfile
from ..knowledge.store import KnowledgeStore
from .errors import CaseBrainError
from .llm import ChatSession, ModelClient

logger = logging.getLogger(__name__)

APOLOGY = "Sorry, I encountered an error. Please try again."
NOT_ACTIVE = "Error: Chat session is not active. Please wait or try refreshing."


class ChatState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    STALE = "stale"
    ERROR = "error"


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "user" or "model"
    text: str


class ChatSessionManager:
    """Keeps one assistant conversation in step with the knowledge base.

    A session is bound to the ``case_context`` it was created with. Whenever
    the store's context no longer matches that snapshot the session is stale,
    and ``ensure_synced`` replaces it before it is used again.
    """

    def __init__(
        self, store: KnowledgeStore, model: ModelClient, profile: CaseProfile
    ) -> None:
        self.store = store
        self.model = model
        self.profile = profile
        self.history: list[ChatMessage] = []
        self.busy = False
        self.closed = False

        self._session: ChatSession | None = None
        self._bound_snapshot: str | None = None
        self._state = ChatState.UNINITIALIZED

    @property
    def bound_snapshot(self) -> str | None:
        return self._bound_snapshot

    @property
    def state(self) -> ChatState:
        if (
            self._state in (ChatState.READY, ChatState.ERROR)
            and self._bound_snapshot != self.store.case_context
        ):
            self._state = ChatState.STALE
        return self._state

    @property
    def has_session(self) -> bool:
        return self._session is not None

    async def ensure_synced(self) -> ChatState:
        """Entry-point check: (re)initialize when missing or stale."""
        if self.state in (ChatState.UNINITIALIZED, ChatState.STALE):
            await self._initialize()
        return self._state

    async def send(self, message: str) -> ChatMessage | None:
        if not message.strip():
            return None

        self.history.append(ChatMessage(role="user", text=message))

        if self._session is None:
            return self._append_model(NOT_ACTIVE)

        session = self._session
        self.busy = True
        try:
            reply = await session.send_message(message)
        except Exception as exc:
            logger.error(
                "Error sending message to AI: %s",
                exc,
                exc_info=not isinstance(exc, CaseBrainError),
            )
            reply = APOLOGY
        else:
            # recovered from a failed init
            if self._state is ChatState.ERROR and session is self._session:
                self._state = ChatState.READY
        finally:
            self.busy = False

        if self.closed:
            return None
        return self._append_model(reply)

    def close(self) -> None:
        self.closed = True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _initialize(self) -> None:
        snapshot = self.store.case_context
        self._state = ChatState.INITIALIZING
        self._session = None
        self._bound_snapshot = snapshot
        self.busy = True

        try:
            session = self.model.create_chat(self._system_instruction(snapshot))
            self._session = session
            logger.info("Chat session initialized with %d chars of context", len(snapshot))
            intro = await session.send_message("")
        except Exception as exc:
            logger.error(
                "Error sending initial message to AI: %s",
                exc,
                exc_info=not isinstance(exc, CaseBrainError),
            )
            if not self.closed:
                self.history = [ChatMessage(role="model", text=APOLOGY)]
                self._state = ChatState.ERROR
            return
        except asyncio.CancelledError:
            self._state = ChatState.ERROR
            raise
        finally:
            self.busy = False

        if self.closed:
            return
        self.history = [ChatMessage(role="model", text=intro)]
        self._state = ChatState.READY

    def _append_model(self, text: str) -> ChatMessage:
        entry = ChatMessage(role="model", text=text)
        self.history.append(entry)
        return entry

    def _system_instruction(self, case_context: str) -> str:
        p = self.profile
        return (
            f'You are "Legal Buddy," an expert AI assistant specializing in the {p.court}. '
            f"You are advising {p.litigant} in the case {p.case_name}. "
            "You are logical, rational, and empathetic.\n\n"
            f"Your primary goal is to provide guidance that is compliant with {p.court} "
            f"rules and laws. You MUST ground your advice in the {p.legislation} and "
            f"{p.court} court procedures. When relevant, you can refer to key concepts "
            "like 'the best interests of the child' (s 60CC), 'parental responsibility', "
            "and 'unacceptable risk of harm'.\n\n"
            f"**CRITICAL CONTEXT: {p.case_name} ({p.file_number})**\n"
            f"{case_context}\n\n"
            "You MUST use this context to inform all your responses. Start the "
            "conversation by introducing yourself and asking how you can help."
        )
