"""
Shared fixtures: in-memory fakes for the model service, the streaming
transcription session and the capture device.
"""

import asyncio
import json
from typing import AsyncIterator, Optional

import pytest

from casebrain.engine.errors import DeviceAccessError, UpstreamTransportError
from casebrain.engine.task_relay import TaskRelay
from casebrain.engine.transcriber import AudioFrame, TranscriptEvent
from casebrain.knowledge import CASE_PROFILES
from casebrain.knowledge.store import KnowledgeStore


class FakeChat:
    def __init__(self, system_instruction: str, replies: list) -> None:
        self.system_instruction = system_instruction
        self.replies = replies
        self.sent: list[str] = []

    async def send_message(self, message: str) -> str:
        self.sent.append(message)
        reply = self.replies.pop(0) if self.replies else "ok"
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeModel:
    """Scripted stand-in for the model service.

    Each list holds the responses to hand out in order; an Exception entry is
    raised instead of returned.
    """

    def __init__(self) -> None:
        self.structured: list = []
        self.images: list = []
        self.chat_replies: list = []
        self.prompts: list[str] = []
        self.chats: list[FakeChat] = []

    async def generate_structured(self, prompt, schema, reasoning=True):
        self.prompts.append(prompt)
        return self._next(self.structured)

    async def analyze_image(self, base64_image, mime_type, prompt):
        self.prompts.append(prompt)
        return self._next(self.images)

    def create_chat(self, system_instruction):
        chat = FakeChat(system_instruction, self.chat_replies)
        self.chats.append(chat)
        return chat

    @staticmethod
    def _next(queue: list):
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeStreamingSession:
    def __init__(self, fragments: Optional[list] = None) -> None:
        self.fragments = list(fragments or [])
        self.sent: list[tuple[str, str]] = []
        self.closed = False
        self._done = asyncio.Event()

    async def send_audio(self, data: str, mime_type: str) -> None:
        self.sent.append((data, mime_type))

    async def events(self) -> AsyncIterator[TranscriptEvent]:
        for item in self.fragments:
            if isinstance(item, Exception):
                raise item
            yield item
        await self._done.wait()

    async def close(self) -> None:
        self.closed = True
        self._done.set()


class FakeCapture:
    def __init__(self, frames: Optional[list] = None, deny: bool = False) -> None:
        self._frames = list(frames or [])
        self.deny = deny
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    async def open(self) -> None:
        self.calls.append("open")
        if self.deny:
            raise DeviceAccessError("Permission denied")

    async def frames(self) -> AsyncIterator[AudioFrame]:
        for i, samples in enumerate(self._frames):
            yield AudioFrame(samples=samples, timestamp=float(i))

    async def stop(self) -> None:
        self.calls.append("stop")
        if "stop" in self.fail_on:
            raise RuntimeError("track already ended")

    async def close(self) -> None:
        self.calls.append("close")


@pytest.fixture
def profile():
    return CASE_PROFILES["lees_v_lees"]


@pytest.fixture
def store(profile):
    return KnowledgeStore.from_profile(profile)


@pytest.fixture
def relay():
    return TaskRelay()


@pytest.fixture
def model():
    return FakeModel()


def as_json(value) -> str:
    return json.dumps(value)


def transport_error() -> UpstreamTransportError:
    return UpstreamTransportError("quota exceeded")
