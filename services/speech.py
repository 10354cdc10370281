# services/speech.py

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

SPEECH_UNSUPPORTED = (
    "Speech synthesis is not supported in your browser. "
    "Please use Safari on iPhone or a modern desktop browser."
)
VOICES_LOADING = "Voices are still loading. Please wait a moment and try again."

class SpeechEngine(ABC):
    """Text-to-speech capability consumed by the phonics game."""

    supported: bool = False
    voices_loaded: bool = False

    @property
    def ready(self) -> bool:
        return self.supported and self.voices_loaded

    @property
    def unavailable_reason(self) -> Optional[str]:
        if not self.supported:
            return SPEECH_UNSUPPORTED
        if not self.voices_loaded:
            return VOICES_LOADING
        return None

    @abstractmethod
    def speak(self, word: str, on_end: Callable[[], None]) -> None:
        raise NotImplementedError

    @abstractmethod
    def cancel(self) -> None:
        raise NotImplementedError

class QueuedSpeechEngine(SpeechEngine):
    """
    Speech that happens somewhere else (the browser, or a test).

    Utterances are queued for the client to play; the client reports the end
    of playback through ``finish()``.
    """

    def __init__(self, supported: bool = True, voices_loaded: bool = True):
        self.supported = supported
        self.voices_loaded = voices_loaded
        self.utterances: List[str] = []
        self.current: Optional[str] = None
        self._on_end: Optional[Callable[[], None]] = None

    @property
    def is_playing(self) -> bool:
        return self.current is not None

    def speak(self, word: str, on_end: Callable[[], None]) -> None:
        self.utterances.append(word)
        self.current = word
        self._on_end = on_end
        logger.debug("Queued utterance %r", word)

    def finish(self) -> bool:
        if self.current is None:
            return False
        callback = self._on_end
        self.current = None
        self._on_end = None
        if callback is not None:
            callback()
        return True

    def cancel(self) -> None:
        # A cancelled utterance never reports completion
        self.current = None
        self._on_end = None
