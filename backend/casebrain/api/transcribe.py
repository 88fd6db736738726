"""Live transcription over a websocket.

Client protocol:
    -> {"type": "start"}                 microphone opened
    -> {"type": "device_error", ...}     microphone refused / unsupported
    -> binary frames                     float32 little-endian mono @ 16 kHz
    -> {"type": "stop"}
    <- {"type": "transcript", "text": fragment}
    <- {"type": "error", "message": ...}
    <- {"type": "done", "transcript": full text}
"""

import json
import logging
import sys
import time
from array import array
from typing import AsyncIterator

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from ..engine.errors import DeviceAccessError, InputRejected
from ..engine.transcriber import AudioFrame
from .deps import current_workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transcribe", tags=["transcribe"])


class WebSocketAudioCapture:
    """Microphone frames captured by the browser and pushed over the socket."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        self._stopped = False

    async def open(self) -> None:
        try:
            message = await self.websocket.receive_json()
        except (WebSocketDisconnect, ValueError) as exc:
            raise DeviceAccessError("Client did not start capture") from exc

        if message.get("type") != "start":
            detail = message.get("detail") or "Your browser does not support audio recording."
            raise DeviceAccessError(detail)

    async def frames(self) -> AsyncIterator[AudioFrame]:
        while not self._stopped:
            try:
                message = await self.websocket.receive()
            except WebSocketDisconnect:
                return
            if message["type"] == "websocket.disconnect":
                return

            if message.get("bytes"):
                data = message["bytes"]
                samples = array("f")
                samples.frombytes(data[: len(data) - len(data) % samples.itemsize])
                if sys.byteorder == "big":
                    samples.byteswap()
                yield AudioFrame(samples=samples, timestamp=time.monotonic())
            elif message.get("text"):
                try:
                    control = json.loads(message["text"])
                except ValueError:
                    logger.warning("Ignoring malformed control message")
                    continue
                if control.get("type") == "stop":
                    return

    async def stop(self) -> None:
        self._stopped = True

    async def close(self) -> None:
        self._stopped = True


@router.websocket("/ws")
async def transcribe(websocket: WebSocket):
    workspace = current_workspace(websocket.app)
    if workspace is None:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return

    transcriber = workspace.transcriber
    await websocket.accept()

    async def send_fragment(text: str) -> None:
        await websocket.send_json({"type": "transcript", "text": text})

    capture = WebSocketAudioCapture(websocket)
    try:
        started = await transcriber.start(capture, on_fragment=send_fragment)
    except InputRejected as exc:
        await websocket.send_json({"type": "error", "message": str(exc)})
        await websocket.close()
        return

    if not started:
        await websocket.send_json({"type": "error", "message": transcriber.error})
        await websocket.close()
        return

    try:
        await transcriber.wait()
    finally:
        await transcriber.stop()

    try:
        if transcriber.error:
            await websocket.send_json({"type": "error", "message": transcriber.error})
        await websocket.send_json({"type": "done", "transcript": transcriber.transcript})
        await websocket.close()
    except (WebSocketDisconnect, RuntimeError):
        logger.info("Transcription client went away before the final transcript")
