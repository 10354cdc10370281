# services/trial_runner.py

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from services.games import TrialGame, Verdict
from services.scheduler import ScheduledCall, Scheduler
from services.speech import SpeechEngine
from services.stimulus import StimulusSurface

logger = logging.getLogger(__name__)

MAX_TRIALS = 5
TICK_MS = 100

AGE_REQUIRED = "Please enter your age before starting the game."
SPEECH_REQUIRED = (
    "This game requires speech synthesis. "
    "Please use a modern browser like Chrome, Firefox, or Safari."
)

class RunnerState(str, Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    AWAITING_RESPONSE = "awaiting_response"
    SCORING = "scoring"
    ASSESSMENT_COMPLETE = "assessment_complete"

class TrialRunner:
    """
    Round lifecycle shared by every game:

        idle -> presenting -> awaiting_response -> scoring
             -> presenting (next trial) | assessment_complete

    The game supplies trials, the correctness check and the session record;
    the runner owns timing, the input lock and the scorer.
    """

    def __init__(
        self,
        game: TrialGame,
        scheduler: Scheduler,
        *,
        max_trials: int = MAX_TRIALS,
        surface: Optional[StimulusSurface] = None,
        speech: Optional[SpeechEngine] = None,
        on_complete: Optional[Callable[["TrialRunner", int], None]] = None,
    ):
        self.game = game
        self.scheduler = scheduler
        self.max_trials = max_trials
        self.surface = surface or StimulusSurface()
        self.speech = speech
        self.on_complete = on_complete
        self.scorer = game.create_scorer(max_trials)

        self.state = RunnerState.IDLE
        self.blocked_reason: Optional[str] = None
        self.age: Optional[float] = None
        self._clear_attempt()

    def _clear_attempt(self) -> None:
        self.trial_index = 0
        self.current_trial = None
        self.responses: List[Any] = []
        self.correct_count = 0
        self.live_score = 0
        self.input_locked = True
        self.round_start_time: Optional[float] = None
        self.allowed_time: Optional[int] = None
        self.time_left: Optional[float] = None
        self.timed_out = False
        self.is_playing = False
        self._tick_call: Optional[ScheduledCall] = None
        self._unlock_call: Optional[ScheduledCall] = None

    # -----------------------------
    # Lifecycle

    def start_game(self, age: Optional[float]) -> bool:
        self.blocked_reason = None

        if not age or age < 1:
            self.blocked_reason = AGE_REQUIRED
        elif self.game.requires_speech:
            if self.speech is None or not self.speech.supported:
                self.blocked_reason = SPEECH_REQUIRED
            elif not self.speech.ready:
                self.blocked_reason = self.speech.unavailable_reason

        if self.blocked_reason:
            logger.warning("Refusing to start %s: %s", self.game.mode, self.blocked_reason)
            return False

        self._stop_everything()
        self.game.reset()
        self.scorer.reset()
        self._clear_attempt()
        self.age = age
        self.surface.on_score(0, 0)

        logger.info("Starting %s for age %s", self.game.mode, age)
        self._begin_trial()
        return True

    def reset(self) -> None:
        self._stop_everything()
        self.game.reset()
        self.scorer.reset()
        self._clear_attempt()
        self.blocked_reason = None
        self.state = RunnerState.IDLE

    def teardown(self) -> None:
        self._stop_everything()

    def _stop_everything(self) -> None:
        self.scheduler.cancel_all()
        if self.speech is not None:
            self.speech.cancel()
        self.is_playing = False

    # -----------------------------
    # Trial flow

    def _begin_trial(self) -> None:
        # Anything still queued belongs to the previous round
        self.scheduler.cancel_all()
        self.current_trial = self.game.next_trial(self.trial_index)
        self.responses = []
        self.input_locked = True
        self.round_start_time = None
        self.allowed_time = None
        self.time_left = None
        self.timed_out = False
        self._tick_call = None
        self._unlock_call = None

        self.state = RunnerState.PRESENTING
        self.surface.present(self.current_trial)
        self.game.present(self.current_trial, self.scheduler, self.surface, self._open_response_window)

    def _open_response_window(self) -> None:
        self.round_start_time = self.scheduler.now
        self.state = RunnerState.AWAITING_RESPONSE
        self.input_locked = False

        allowed = self.game.allowed_time_ms(self.age)
        if allowed is not None:
            self.allowed_time = allowed
            self.time_left = allowed
            self._tick_call = self.scheduler.call_later(TICK_MS, self._tick)

    def _tick(self) -> None:
        self.time_left = max(0, self.time_left - TICK_MS)
        if self.time_left <= 0:
            self.timed_out = True
            self._tick_call = None
            self.surface.on_timeout()
            return
        self._tick_call = self.scheduler.call_later(TICK_MS, self._tick)

    def _unlock_input(self) -> None:
        self._unlock_call = None
        if self.state is RunnerState.AWAITING_RESPONSE:
            self.input_locked = False

    def respond(self, unit: Any) -> bool:
        """Feed one response unit. Returns False when it was not accepted."""
        if self.state is not RunnerState.AWAITING_RESPONSE or self.input_locked:
            return False

        value = self.game.normalize_response(self.current_trial, unit)
        if value is None:
            return False

        self.responses.append(value)
        verdict = self.game.evaluate(self.current_trial, self.responses)

        if verdict is Verdict.PENDING:
            self.input_locked = True
            self._unlock_call = self.scheduler.call_later(self.game.input_settle_ms, self._unlock_input)
            return True

        self._score_trial(verdict is Verdict.SUCCESS)
        return True

    def _score_trial(self, success: bool) -> None:
        self.state = RunnerState.SCORING
        self.input_locked = True
        for call in (self._tick_call, self._unlock_call):
            if call is not None:
                call.cancel()
        self._tick_call = None
        self._unlock_call = None

        session = self.game.build_session(
            self.current_trial,
            list(self.responses),
            success=success,
            trial_number=self.trial_index + 1,
            response_time=self.scheduler.now - self.round_start_time,
            completed_on_time=not self.timed_out,
            allowed_time=self.allowed_time,
        )
        self.scorer.add_session(session)
        if success:
            self.correct_count += 1

        self.live_score = self.scorer.calculate_score()
        self.surface.show_feedback(success, self.game.feedback(self.current_trial, session))
        self.surface.on_score(self.live_score, self.correct_count)

        self.scheduler.call_later(self.game.settle_delay_ms, self._advance)

    def _advance(self) -> None:
        self.trial_index += 1
        self.surface.on_advance(self.trial_index)

        if self.trial_index >= self.max_trials:
            self.state = RunnerState.ASSESSMENT_COMPLETE
            self.input_locked = True
            final_score = self.scorer.calculate_score()
            logger.info("%s complete with score %d", self.game.mode, final_score)
            self.surface.on_complete(final_score)
            if self.on_complete is not None:
                self.on_complete(self, final_score)
            return

        self._begin_trial()

    # -----------------------------
    # Speech

    def play_stimulus(self) -> bool:
        """
        Speak the current word. A missing or unready engine is reported
        through ``blocked_reason`` and a False return.
        """
        text = self.game.speech_text(self.current_trial) if self.current_trial is not None else None
        if text is None or self.state not in (RunnerState.PRESENTING, RunnerState.AWAITING_RESPONSE):
            return False

        if self.speech is None or not self.speech.ready:
            self.blocked_reason = (
                self.speech.unavailable_reason if self.speech is not None else SPEECH_REQUIRED
            )
            logger.warning("Speech playback rejected: %s", self.blocked_reason)
            return False

        self.blocked_reason = None
        self.speech.cancel()
        self.is_playing = True
        self.speech.speak(text, self._speech_finished)
        return True

    def _speech_finished(self) -> None:
        self.is_playing = False

    # -----------------------------
    # Reporting

    def snapshot(self) -> Dict[str, Any]:
        return {
            "mode": self.game.mode,
            "skill": self.game.skill,
            "state": self.state.value,
            "trial_number": min(self.trial_index + 1, self.max_trials),
            "max_trials": self.max_trials,
            "input_locked": self.input_locked,
            "live_score": self.live_score,
            "correct_count": self.correct_count,
            "time_left": self.time_left,
            "allowed_time": self.allowed_time,
            "is_playing": self.is_playing,
            "blocked_reason": self.blocked_reason,
        }
