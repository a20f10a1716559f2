import pytest

from storefront_search.voice import (
    VOICE_FAILED_MESSAGE,
    VOICE_UNSUPPORTED_MESSAGE,
    VoiceController,
    VoiceEvent,
    VoiceRecognitionError,
    VoiceState,
    VoiceUnavailableError,
    transition,
)

from conftest import FakeVoice


@pytest.mark.parametrize(
    "state,event,expected",
    [
        (VoiceState.IDLE, VoiceEvent.START, VoiceState.LISTENING),
        (VoiceState.IDLE, VoiceEvent.TRANSCRIPT, VoiceState.IDLE),
        (VoiceState.IDLE, VoiceEvent.STOP, VoiceState.IDLE),
        (VoiceState.LISTENING, VoiceEvent.TRANSCRIPT, VoiceState.IDLE),
        (VoiceState.LISTENING, VoiceEvent.ERROR, VoiceState.IDLE),
        (VoiceState.LISTENING, VoiceEvent.STOP, VoiceState.IDLE),
        (VoiceState.LISTENING, VoiceEvent.START, VoiceState.LISTENING),
    ],
)
def test_transition_table(state, event, expected) -> None:
    assert transition(state, event) is expected


@pytest.mark.asyncio
async def test_listen_returns_transcript() -> None:
    voice = VoiceController(FakeVoice("cough syrup"))
    assert voice.available

    outcome = await voice.listen()

    assert outcome.ok
    assert outcome.transcript == "cough syrup"
    assert voice.state is VoiceState.IDLE


@pytest.mark.asyncio
async def test_listen_without_capability() -> None:
    voice = VoiceController()
    assert not voice.available

    outcome = await voice.listen()

    assert isinstance(outcome.error, VoiceUnavailableError)
    assert str(outcome.error) == VOICE_UNSUPPORTED_MESSAGE
    assert voice.state is VoiceState.IDLE


@pytest.mark.asyncio
async def test_recognition_error_returns_to_idle() -> None:
    voice = VoiceController(FakeVoice(error=RuntimeError("no-speech")))

    outcome = await voice.listen()

    assert isinstance(outcome.error, VoiceRecognitionError)
    assert str(outcome.error) == VOICE_FAILED_MESSAGE
    assert voice.state is VoiceState.IDLE


@pytest.mark.asyncio
async def test_start_while_listening_is_rejected() -> None:
    capability = FakeVoice()
    voice = VoiceController(capability)
    voice.state = VoiceState.LISTENING

    outcome = await voice.listen()

    assert outcome.error is not None
    assert capability.started == 0


@pytest.mark.asyncio
async def test_stop_returns_to_idle() -> None:
    capability = FakeVoice()
    voice = VoiceController(capability)
    voice.state = VoiceState.LISTENING

    outcome = await voice.stop()

    assert outcome.error is None
    assert capability.stopped == 1
    assert voice.state is VoiceState.IDLE


@pytest.mark.asyncio
async def test_stop_failure_is_reported_and_state_resets() -> None:
    class BrokenStop(FakeVoice):
        async def stop_listening(self) -> None:
            raise RuntimeError("device busy")

    voice = VoiceController(BrokenStop())
    voice.state = VoiceState.LISTENING

    outcome = await voice.stop()

    assert isinstance(outcome.error, VoiceRecognitionError)
    assert voice.state is VoiceState.IDLE
