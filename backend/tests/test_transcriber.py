import asyncio
import base64
import struct

import pytest

from casebrain.engine.errors import InputRejected, UpstreamTransportError
from casebrain.engine.transcriber import (
    CONNECTION_ERROR,
    MICROPHONE_ERROR,
    PCM_MIME_TYPE,
    Transcriber,
    TranscriptEvent,
    encode_pcm16,
)
from conftest import FakeCapture, FakeStreamingSession


def make_transcriber(session):
    async def connect():
        if isinstance(session, Exception):
            raise session
        return session

    return Transcriber(connect)


def test_encode_pcm16_little_endian_and_clamped():
    raw = base64.b64decode(encode_pcm16([0.0, 0.5, -1.0, 1.0]))
    assert struct.unpack("<4h", raw) == (0, 16384, -32768, 32767)


@pytest.mark.asyncio
class TestTranscriber:
    async def test_frames_are_streamed_and_fragments_collected(self):
        session = FakeStreamingSession(
            [TranscriptEvent(text="Hello "), TranscriptEvent(audio="AAAA"), TranscriptEvent(text="world")]
        )
        capture = FakeCapture(frames=[[0.0, 0.25], [0.5]])
        transcriber = make_transcriber(session)
        received = []

        async def on_fragment(text):
            received.append(text)

        assert await transcriber.start(capture, on_fragment=on_fragment)
        assert transcriber.recording
        await transcriber.wait()
        await asyncio.sleep(0)
        await transcriber.stop()

        assert transcriber.transcript == "Hello world"
        assert received == ["Hello ", "world"]
        assert [mime for _, mime in session.sent] == [PCM_MIME_TYPE, PCM_MIME_TYPE]
        assert session.closed
        assert capture.calls == ["open", "stop", "close"]
        assert not transcriber.recording

    async def test_second_start_is_rejected(self):
        transcriber = make_transcriber(FakeStreamingSession())
        await transcriber.start(FakeCapture())

        with pytest.raises(InputRejected):
            await transcriber.start(FakeCapture())
        await transcriber.stop()

    async def test_overlapping_starts_share_one_microphone(self):
        sessions = []

        async def slow_connect():
            await asyncio.sleep(0)
            session = FakeStreamingSession()
            sessions.append(session)
            return session

        transcriber = Transcriber(slow_connect)
        first, second = FakeCapture(), FakeCapture()

        results = await asyncio.gather(
            transcriber.start(first), transcriber.start(second), return_exceptions=True
        )
        await transcriber.stop()

        assert results[0] is True
        assert isinstance(results[1], InputRejected)
        assert first.calls == ["open", "stop", "close"]
        assert second.calls == []
        assert len(sessions) == 1 and sessions[0].closed

    async def test_start_can_follow_a_failed_start(self):
        transcriber = make_transcriber(FakeStreamingSession())

        assert not await transcriber.start(FakeCapture(deny=True))
        assert await transcriber.start(FakeCapture())
        await transcriber.stop()

    async def test_close_during_connect_releases_microphone(self):
        session = FakeStreamingSession()

        async def connect():
            await transcriber.close()
            return session

        transcriber = Transcriber(connect)
        capture = FakeCapture()

        assert not await transcriber.start(capture)
        assert not transcriber.recording
        assert session.closed
        assert capture.calls == ["open", "stop", "close"]

    async def test_denied_microphone_never_records(self):
        transcriber = make_transcriber(FakeStreamingSession())
        capture = FakeCapture(deny=True)

        assert not await transcriber.start(capture)

        assert transcriber.error == MICROPHONE_ERROR
        assert not transcriber.recording
        assert capture.calls == ["open"]

    async def test_session_connect_failure_releases_microphone(self):
        transcriber = make_transcriber(UpstreamTransportError("no route"))
        capture = FakeCapture()

        assert not await transcriber.start(capture)

        assert transcriber.error == CONNECTION_ERROR
        assert capture.calls == ["open", "stop", "close"]

    async def test_teardown_continues_after_failing_step(self):
        session = FakeStreamingSession()
        capture = FakeCapture()
        capture.fail_on.add("stop")
        transcriber = make_transcriber(session)

        await transcriber.start(capture)
        await transcriber.stop()

        assert session.closed
        assert capture.calls == ["open", "stop", "close"]
        assert not transcriber.recording

    async def test_stream_error_stops_recording(self):
        session = FakeStreamingSession([TranscriptEvent(text="partial"), UpstreamTransportError("reset")])
        capture = FakeCapture()
        transcriber = make_transcriber(session)

        await transcriber.start(capture)
        await transcriber.wait()
        await asyncio.sleep(0)

        assert transcriber.error == CONNECTION_ERROR
        assert transcriber.transcript == "partial"
        assert not transcriber.recording
        assert session.closed
        assert capture.calls == ["open", "stop", "close"]

    async def test_close_is_safe_when_idle(self):
        transcriber = make_transcriber(FakeStreamingSession())
        await transcriber.close()
        assert transcriber.closed
        assert not transcriber.recording
