"""Live dictation: microphone frames in, transcript fragments out.

The transcriber owns at most one capture device and one streaming session at
a time. ``stop`` always runs the full teardown so the microphone is released
even when one of the steps fails.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import sys
from array import array
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol, Sequence

from .errors import DeviceAccessError, InputRejected, UpstreamTransportError

logger = logging.getLogger(__name__)

PCM_SAMPLE_RATE = 16000
PCM_MIME_TYPE = f"audio/pcm;rate={PCM_SAMPLE_RATE}"

MICROPHONE_ERROR = "Could not access microphone. Please check your browser permissions."
CONNECTION_ERROR = "A connection error occurred during transcription."


@dataclass(frozen=True)
class AudioFrame:
    samples: Sequence[float]  # mono, -1.0 .. 1.0
    timestamp: float


@dataclass(frozen=True)
class TranscriptEvent:
    text: Optional[str] = None
    audio: Optional[str] = None  # base64 synthesized audio, not played


class AudioCapture(Protocol):
    async def open(self) -> None: ...

    def frames(self) -> AsyncIterator[AudioFrame]: ...

    async def stop(self) -> None: ...

    async def close(self) -> None: ...


class StreamingSession(Protocol):
    async def send_audio(self, data: str, mime_type: str) -> None: ...

    def events(self) -> AsyncIterator[TranscriptEvent]: ...

    async def close(self) -> None: ...


SessionFactory = Callable[[], Awaitable[StreamingSession]]
FragmentCallback = Callable[[str], Awaitable[None]]


def encode_pcm16(samples: Sequence[float]) -> str:
    """Float samples -> base64 of little-endian signed 16-bit PCM."""
    pcm = array("h", (max(-32768, min(32767, int(s * 32768))) for s in samples))
    if sys.byteorder == "big":
        pcm.byteswap()
    return base64.b64encode(pcm.tobytes()).decode("ascii")


class Transcriber:
    def __init__(self, connect: SessionFactory) -> None:
        self._connect = connect
        self.recording = False
        self.transcript = ""
        self._starting = False
        self.error: str | None = None
        self.closed = False

        self._capture: AudioCapture | None = None
        self._session: StreamingSession | None = None
        self._pump: asyncio.Task | None = None
        self._listener: asyncio.Task | None = None
        self._on_fragment: FragmentCallback | None = None

    async def start(
        self, capture: AudioCapture, on_fragment: FragmentCallback | None = None
    ) -> bool:
        if self.recording or self._starting:
            raise InputRejected("A recording is already in progress")

        # claimed before the first await so overlapping starts are rejected
        self._starting = True
        try:
            return await self._start(capture, on_fragment)
        finally:
            self._starting = False

    async def _start(
        self, capture: AudioCapture, on_fragment: FragmentCallback | None
    ) -> bool:
        self.error = None
        self.transcript = ""

        try:
            await capture.open()
        except DeviceAccessError as exc:
            logger.error("Failed to start recording: %s", exc)
            self.error = MICROPHONE_ERROR
            return False

        try:
            session = await self._connect()
        except UpstreamTransportError as exc:
            logger.error("Failed to open transcription session: %s", exc)
            self.error = CONNECTION_ERROR
            self._capture = capture
            await self._teardown()
            return False

        self._capture = capture
        self._session = session
        if self.closed:
            await self._teardown()
            return False

        self._on_fragment = on_fragment
        self.recording = True
        self._pump = asyncio.create_task(self._pump_frames(capture, session))
        self._listener = asyncio.create_task(self._listen(session))
        logger.info("Recording started")
        return True

    async def wait(self) -> None:
        """Block until the capture runs dry or the session ends."""
        tasks = [t for t in (self._pump, self._listener) if t is not None]
        if tasks:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

    async def stop(self) -> None:
        if not self.recording and self._capture is None:
            return
        await self._teardown()
        logger.info("Recording stopped (%d chars transcribed)", len(self.transcript))

    async def close(self) -> None:
        self.closed = True
        await self.stop()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _pump_frames(
        self, capture: AudioCapture, session: StreamingSession
    ) -> None:
        try:
            async for frame in capture.frames():
                await session.send_audio(encode_pcm16(frame.samples), PCM_MIME_TYPE)
        except UpstreamTransportError as exc:
            logger.error("Live session error: %s", exc)
            self.error = CONNECTION_ERROR
            await self.stop()

    async def _listen(self, session: StreamingSession) -> None:
        try:
            async for event in session.events():
                if event.text:
                    self.transcript += event.text
                    if self._on_fragment is not None:
                        await self._on_fragment(event.text)
                if event.audio:
                    logger.debug("Received model audio data, but not playing it.")
        except UpstreamTransportError as exc:
            logger.error("Live session error: %s", exc)
            self.error = CONNECTION_ERROR
            await self.stop()
        logger.info("Live session closed.")

    async def _teardown(self) -> None:
        capture = self._capture
        steps = [
            ("close streaming session", self._close_session),
            ("stop capture tracks", capture.stop if capture else None),
            ("disconnect frame pump", self._disconnect_pump),
            ("close capture context", capture.close if capture else None),
        ]
        for label, step in steps:
            if step is None:
                continue
            try:
                await step()
            except Exception:
                logger.exception("Transcription teardown step %r failed", label)

        self._capture = None
        self._session = None
        self._on_fragment = None
        self.recording = False

    async def _close_session(self) -> None:
        session, self._session = self._session, None
        listener, self._listener = self._listener, None
        try:
            if session is not None:
                await session.close()
        finally:
            await _cancel(listener)

    async def _disconnect_pump(self) -> None:
        pump, self._pump = self._pump, None
        await _cancel(pump)


async def _cancel(task: asyncio.Task | None) -> None:
    if task is None or task is asyncio.current_task():
        return
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
