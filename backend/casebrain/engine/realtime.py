"""Streaming transcription over the OpenAI realtime websocket."""

from __future__ import annotations

import base64
import logging
import sys
from array import array
from typing import AsyncIterator

from openai import AsyncOpenAI, OpenAIError
from websockets.exceptions import WebSocketException

from ..config import settings
from .errors import UpstreamTransportError
from .transcriber import PCM_SAMPLE_RATE, TranscriptEvent

logger = logging.getLogger(__name__)

REALTIME_SAMPLE_RATE = 24000  # the realtime API's pcm16 format


def resample_pcm16(data: bytes, src_rate: int, dst_rate: int) -> bytes:
    """Linear-interpolation resample of little-endian 16-bit mono PCM."""
    if src_rate == dst_rate or not data:
        return data
    src = array("h")
    src.frombytes(data)
    if sys.byteorder == "big":
        src.byteswap()

    out_len = max(1, len(src) * dst_rate // src_rate)
    step = (len(src) - 1) / max(1, out_len - 1)
    out = array("h")
    for i in range(out_len):
        pos = i * step
        lo = int(pos)
        hi = min(lo + 1, len(src) - 1)
        frac = pos - lo
        out.append(int(src[lo] + (src[hi] - src[lo]) * frac))

    if sys.byteorder == "big":
        out.byteswap()
    return out.tobytes()


class OpenAIRealtimeTranscription:
    def __init__(self, connection) -> None:
        self._connection = connection

    @classmethod
    async def connect(
        cls, client: AsyncOpenAI | None = None
    ) -> "OpenAIRealtimeTranscription":
        client = client or AsyncOpenAI(api_key=settings.openai_api_key)
        manager = client.beta.realtime.connect(model=settings.openai_realtime_model)
        try:
            connection = await manager.enter()
            await connection.session.update(
                session={
                    "modalities": ["text"],
                    "input_audio_format": "pcm16",
                    "input_audio_transcription": {
                        "model": settings.openai_transcribe_model,
                    },
                }
            )
        except (OpenAIError, WebSocketException, OSError) as exc:
            raise UpstreamTransportError(f"Could not open realtime session: {exc}") from exc
        logger.info("Realtime transcription session opened")
        return cls(connection)

    async def send_audio(self, data: str, mime_type: str) -> None:
        pcm = resample_pcm16(base64.b64decode(data), PCM_SAMPLE_RATE, REALTIME_SAMPLE_RATE)
        try:
            await self._connection.input_audio_buffer.append(
                audio=base64.b64encode(pcm).decode("ascii")
            )
        except WebSocketException as exc:
            raise UpstreamTransportError(str(exc)) from exc

    async def events(self) -> AsyncIterator[TranscriptEvent]:
        streamed: set[str] = set()  # items already delivered as deltas
        try:
            async for event in self._connection:
                if event.type == "conversation.item.input_audio_transcription.delta":
                    streamed.add(event.item_id)
                    yield TranscriptEvent(text=event.delta)
                elif event.type == "conversation.item.input_audio_transcription.completed":
                    if event.item_id not in streamed:
                        yield TranscriptEvent(text=event.transcript)
                elif event.type == "response.audio.delta":
                    yield TranscriptEvent(audio=event.delta)
                elif event.type == "error":
                    raise UpstreamTransportError(event.error.message)
        except WebSocketException as exc:
            raise UpstreamTransportError(str(exc)) from exc

    async def close(self) -> None:
        await self._connection.close()
