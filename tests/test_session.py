"""AnalysisSession: state transitions seen by the presentation layer."""
import asyncio
import io

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from image_ask.constants import QUICK_ACTIONS
from image_ask.errors import EncodingError
from image_ask.models import Answer, Failure, UploadedImage
from image_ask.session import AnalysisSession, Phase, SessionState

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8
IMAGE = UploadedImage(media_type="image/png", encoded_data="iVBORw0KGgo=")


def make_session(response=None):
    orchestrator = MagicMock()
    orchestrator.submit = AsyncMock(return_value=response or Answer(text="a cat"))
    states: list[SessionState] = []
    return AnalysisSession(orchestrator, on_change=states.append), orchestrator, states


async def ready_session(response=None):
    session, orchestrator, states = make_session(response)
    await session.select_file(PNG_BYTES)
    session.set_question("What is it?")
    states.clear()
    return session, orchestrator, states


def phases(states: list[SessionState]) -> list[Phase]:
    return [s.phase for s in states]


# ── SessionState flags ────────────────────────────────────────────────────────


def test_initial_state_is_idle_and_not_submittable():
    state = SessionState()

    assert state.phase is Phase.IDLE
    assert not state.can_submit
    assert not state.is_loading


def test_can_submit_requires_image_question_and_not_loading():
    assert SessionState(image=IMAGE, question="q").can_submit
    assert not SessionState(image=IMAGE, question="  ").can_submit
    assert not SessionState(image=IMAGE, question="q", phase=Phase.IN_FLIGHT).can_submit


# ── select_file ───────────────────────────────────────────────────────────────


async def test_select_file_stores_encoded_image():
    session, _, _ = make_session()

    state = await session.select_file(PNG_BYTES)

    assert state.image is not None
    assert state.image.media_type == "image/png"
    assert state.error is None


async def test_select_file_clears_stale_state_before_read_completes():
    session, _, states = await ready_session()
    await session.submit()
    assert session.state.answer == "a cat"

    gate = asyncio.Event()

    async def slow_encode(_):
        await gate.wait()
        return IMAGE

    with patch("image_ask.session.encode_image", new=slow_encode):
        task = asyncio.create_task(session.select_file(b"new"))
        await asyncio.sleep(0)
        cleared = session.state
        gate.set()
        await task

    assert cleared.image is None
    assert cleared.answer is None
    assert cleared.error is None
    assert session.state.image == IMAGE


async def test_select_file_encoding_error_leaves_no_image():
    session, _, _ = make_session()
    await session.select_file(PNG_BYTES)

    with patch(
        "image_ask.session.encode_image",
        new=AsyncMock(side_effect=EncodingError("malformed data")),
    ):
        state = await session.select_file(b"bad")

    assert state.image is None
    assert state.error_kind == "encoding"
    assert state.error == "Error reading image file. Please try a different image."


# ── submit ────────────────────────────────────────────────────────────────────


async def test_submit_success_transitions():
    session, orchestrator, states = await ready_session()

    state = await session.submit()

    assert phases(states) == [Phase.VALIDATING, Phase.IN_FLIGHT, Phase.SUCCESS, Phase.IDLE]
    assert state.answer == "a cat"
    assert state.error is None
    orchestrator.submit.assert_awaited_once()


async def test_submit_failure_transitions():
    failure = Failure(kind="server", message="Analysis failed: boom.", detail="boom")
    session, _, states = await ready_session(response=failure)

    state = await session.submit()

    assert phases(states) == [Phase.VALIDATING, Phase.IN_FLIGHT, Phase.FAILED, Phase.IDLE]
    assert state.error == "Analysis failed: boom."
    assert state.error_kind == "server"
    assert state.answer is None


async def test_submit_without_image_is_invalid_and_skips_backend():
    session, orchestrator, states = make_session()
    session.set_question("What is it?")
    states.clear()

    state = await session.submit()

    assert phases(states) == [Phase.VALIDATING, Phase.INVALID, Phase.IDLE]
    assert state.error_kind == "validation"
    assert orchestrator.submit.await_count == 0


async def test_in_flight_clears_previous_result():
    session, _, states = await ready_session()
    await session.submit()
    states.clear()

    await session.submit()

    in_flight = next(s for s in states if s.phase is Phase.IN_FLIGHT)
    assert in_flight.answer is None
    assert in_flight.is_loading


# ── quick_action ──────────────────────────────────────────────────────────────


async def test_quick_action_sets_visible_question_and_submits():
    session, orchestrator, _ = await ready_session()

    state = await session.quick_action(QUICK_ACTIONS["identify_objects"])

    assert state.question == QUICK_ACTIONS["identify_objects"]
    request = orchestrator.submit.call_args.args[0]
    assert request.question == QUICK_ACTIONS["identify_objects"]


async def test_quick_action_without_image_is_invalid():
    session, orchestrator, _ = make_session()

    state = await session.quick_action(QUICK_ACTIONS["caption"])

    assert state.error_kind == "validation"
    assert orchestrator.submit.await_count == 0


async def test_select_file_closed_handle_becomes_read_error():
    session, _, _ = make_session()
    handle = io.BytesIO(PNG_BYTES)
    handle.close()

    state = await session.select_file(handle)

    assert state.image is None
    assert state.error_kind == "encoding"
    assert state.error == "Error reading file."


async def test_select_file_text_mode_handle_becomes_read_error(tmp_path):
    session, _, _ = make_session()
    path = tmp_path / "shot.png"
    path.write_text("text, not bytes")

    with open(path) as handle:
        state = await session.select_file(handle)

    assert state.image is None
    assert state.error == "Error reading file."


async def test_overlapping_selections_keep_the_newest_file():
    session, _, _ = make_session()
    gates = {b"old": asyncio.Event(), b"new": asyncio.Event()}
    images = {
        b"old": UploadedImage(media_type="image/png", encoded_data="OLD"),
        b"new": UploadedImage(media_type="image/png", encoded_data="NEW"),
    }

    async def gated_encode(handle):
        await gates[handle].wait()
        return images[handle]

    with patch("image_ask.session.encode_image", new=gated_encode):
        old = asyncio.create_task(session.select_file(b"old"))
        await asyncio.sleep(0)
        new = asyncio.create_task(session.select_file(b"new"))
        await asyncio.sleep(0)
        gates[b"new"].set()
        await new
        gates[b"old"].set()
        await old

    assert session.state.image.encoded_data == "NEW"


async def test_superseded_selection_error_is_dropped():
    session, _, _ = make_session()
    gate = asyncio.Event()

    async def encode(handle):
        if handle == b"bad":
            await gate.wait()
            raise EncodingError("malformed data")
        return IMAGE

    with patch("image_ask.session.encode_image", new=encode):
        bad = asyncio.create_task(session.select_file(b"bad"))
        await asyncio.sleep(0)
        await session.select_file(b"good")
        gate.set()
        await bad

    assert session.state.image == IMAGE
    assert session.state.error is None
