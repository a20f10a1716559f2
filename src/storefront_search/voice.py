"""
Voice capture state machine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)

VOICE_UNSUPPORTED_MESSAGE = "Voice search is not supported on this device"
VOICE_FAILED_MESSAGE = "Voice search failed. Please try again."


class VoiceUnavailableError(RuntimeError):
    """Raised when no voice capability has been provided."""


class VoiceRecognitionError(RuntimeError):
    """Raised by a voice capability when recognition fails."""


class VoiceState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


class VoiceEvent(str, Enum):
    START = "start"
    TRANSCRIPT = "transcript"
    ERROR = "error"
    STOP = "stop"


def transition(state: VoiceState, event: VoiceEvent) -> VoiceState:
    """Return the state that follows *event*; unknown pairs keep *state*."""
    if state is VoiceState.IDLE and event is VoiceEvent.START:
        return VoiceState.LISTENING
    if state is VoiceState.LISTENING and event in (
        VoiceEvent.TRANSCRIPT,
        VoiceEvent.ERROR,
        VoiceEvent.STOP,
    ):
        return VoiceState.IDLE
    return state


class VoiceCapability(Protocol):
    async def start_listening(self) -> str:
        """Listen once and return the transcript."""

    async def stop_listening(self) -> None:
        """Abort an ongoing capture."""


@dataclass(frozen=True)
class VoiceOutcome:
    transcript: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.transcript is not None


class VoiceController:
    def __init__(self, capability: VoiceCapability | None = None) -> None:
        self.capability = capability
        self.state = VoiceState.IDLE

    @property
    def available(self) -> bool:
        return self.capability is not None

    def _apply(self, event: VoiceEvent) -> None:
        self.state = transition(self.state, event)

    async def listen(self) -> VoiceOutcome:
        if self.capability is None:
            return VoiceOutcome(error=VoiceUnavailableError(VOICE_UNSUPPORTED_MESSAGE))
        if self.state is VoiceState.LISTENING:
            return VoiceOutcome(error=VoiceRecognitionError("Voice search is already listening"))

        self._apply(VoiceEvent.START)
        try:
            transcript = await self.capability.start_listening()
        except Exception as exc:
            if self.state is not VoiceState.LISTENING:
                return VoiceOutcome()
            logger.warning("voice recognition failed: %s", exc)
            self._apply(VoiceEvent.ERROR)
            return VoiceOutcome(error=VoiceRecognitionError(VOICE_FAILED_MESSAGE))

        if self.state is not VoiceState.LISTENING:
            # stopped while awaiting; the late transcript is dropped
            return VoiceOutcome()
        self._apply(VoiceEvent.TRANSCRIPT)
        return VoiceOutcome(transcript=transcript)

    async def stop(self) -> VoiceOutcome:
        if self.capability is None:
            self.state = VoiceState.IDLE
            return VoiceOutcome(error=VoiceUnavailableError(VOICE_UNSUPPORTED_MESSAGE))
        try:
            await self.capability.stop_listening()
        except Exception as exc:
            logger.warning("voice stop failed: %s", exc)
            return VoiceOutcome(error=VoiceRecognitionError(VOICE_FAILED_MESSAGE))
        finally:
            self._apply(VoiceEvent.STOP)
        return VoiceOutcome()
