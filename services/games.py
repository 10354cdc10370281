# services/games.py

import random
from abc import ABC, abstractmethod
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

from models.sessions import RecallSession, SpellingSession, StroopSession, TimedRecallSession
from models.trials import PhonicsTrial, RecallTrial, StroopTrial
from services.scorers import (
    AttentionScorer,
    AuditoryProcessingScorer,
    ProcessingSpeedScorer,
    ScorerBase,
    WorkingMemoryScorer,
    round_half_up,
)
from services.similarity import positional_accuracy

MAX_SEQUENCE_ATTEMPTS = 50

# Recall presentation timings (ms)
LEAD_IN_MS = 300
SLOT_MS = 1000
HIGHLIGHT_MS = 700
TRAIL_OUT_MS = 500

COLORS = {
    "RED": "#EF4444",
    "BLUE": "#3B82F6",
    "GREEN": "#22C55E",
    "YELLOW": "#EAB308",
    "PURPLE": "#A855F7",
}
COLOR_NAMES = list(COLORS)
CONGRUENT_PROBABILITY = 0.4

WORD_BANK = [
    PhonicsTrial(word="magazine", image="📖", description="A book with pictures and stories"),
    PhonicsTrial(word="dinosaur", image="🦕", description="A big animal from long ago"),
    PhonicsTrial(word="knife", image="🔪", description="A tool for cutting"),
    PhonicsTrial(word="tape", image="📼", description="Something sticky that holds things together"),
    PhonicsTrial(word="cave", image="🕳️", description="A hollow place in a rock or mountain"),
]

class Verdict(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"

def next_sequence_step(sequence: Sequence[int], total_cells: int, rng) -> int:
    """
    Draw a cell in [0, total_cells) that differs from the previous step.

    Gives up after MAX_SEQUENCE_ATTEMPTS draws and accepts the repeat.
    """
    step = rng.randrange(total_cells)
    attempts = 1
    while attempts < MAX_SEQUENCE_ATTEMPTS and sequence and step == sequence[-1]:
        step = rng.randrange(total_cells)
        attempts += 1
    return step

class TrialGame(ABC):
    """
    One game kind: how trials are generated, shown, checked and recorded.
    The round lifecycle itself lives in TrialRunner.
    """

    mode = ""
    skill = ""
    settle_delay_ms = 1200
    input_settle_ms = 0
    requires_speech = False

    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    @abstractmethod
    def create_scorer(self, max_trials: int) -> ScorerBase:
        raise NotImplementedError

    def reset(self) -> None:
        pass

    @abstractmethod
    def next_trial(self, trial_index: int):
        raise NotImplementedError

    def present(self, trial, scheduler, surface, on_ready: Callable[[], None]) -> None:
        on_ready()

    def allowed_time_ms(self, age: float) -> Optional[int]:
        return None

    @abstractmethod
    def normalize_response(self, trial, unit: Any):
        raise NotImplementedError

    @abstractmethod
    def evaluate(self, trial, responses: List[Any]) -> Verdict:
        raise NotImplementedError

    @abstractmethod
    def build_session(self, trial, responses: List[Any], *, success: bool, trial_number: int,
                      response_time: float, completed_on_time: bool, allowed_time: Optional[int]):
        raise NotImplementedError

    @abstractmethod
    def feedback(self, trial, session) -> str:
        raise NotImplementedError

    def speech_text(self, trial) -> Optional[str]:
        return None

class SequenceRecallGame(TrialGame):
    skill = "working_memory"
    input_settle_ms = 200

    def __init__(self, grid_size: int = 3, rng=None):
        # Cell draws come from the OS entropy pool unless a generator is injected
        super().__init__(rng or random.SystemRandom())
        self.grid_size = grid_size
        self.sequence: List[int] = []

    @property
    def mode(self) -> str:
        return f"{self.grid_size}x{self.grid_size}"

    @property
    def total_cells(self) -> int:
        return self.grid_size * self.grid_size

    def create_scorer(self, max_trials: int) -> ScorerBase:
        return WorkingMemoryScorer(max_trials)

    def reset(self) -> None:
        self.sequence = []

    def next_trial(self, trial_index: int) -> RecallTrial:
        self.sequence = self.sequence + [next_sequence_step(self.sequence, self.total_cells, self.rng)]
        return RecallTrial(sequence=tuple(self.sequence), grid_size=self.grid_size)

    def present(self, trial: RecallTrial, scheduler, surface, on_ready: Callable[[], None]) -> None:
        for index, cell in enumerate(trial.sequence):
            start = LEAD_IN_MS + index * SLOT_MS
            scheduler.call_later(start, partial(surface.highlight, cell))
            scheduler.call_later(start + HIGHLIGHT_MS, partial(surface.highlight, None))

        def finish():
            surface.highlight(None)
            on_ready()

        scheduler.call_later(LEAD_IN_MS + len(trial.sequence) * SLOT_MS + TRAIL_OUT_MS, finish)

    def normalize_response(self, trial: RecallTrial, unit: Any) -> Optional[int]:
        if isinstance(unit, bool):
            return None
        try:
            cell = int(unit)
        except (TypeError, ValueError):
            return None
        if not 0 <= cell < trial.total_cells:
            return None
        return cell

    def evaluate(self, trial: RecallTrial, responses: List[int]) -> Verdict:
        position = len(responses) - 1
        if trial.sequence[position] != responses[position]:
            return Verdict.FAILURE
        if len(responses) == len(trial.sequence):
            return Verdict.SUCCESS
        return Verdict.PENDING

    def build_session(self, trial, responses, *, success, trial_number, response_time,
                      completed_on_time, allowed_time):
        return RecallSession(
            trial_number=trial_number,
            success=success,
            response_time=response_time,
            sequence_length=len(trial.sequence),
            grid_size=self.grid_size,
            total_rounds=trial_number,
        )

    def feedback(self, trial, session) -> str:
        return "Correct!" if session.success else "Wrong square."

class TimedRecallGame(SequenceRecallGame):
    skill = "processing_speed"

    @property
    def mode(self) -> str:
        return f"timed-{self.grid_size}x{self.grid_size}"

    def create_scorer(self, max_trials: int) -> ScorerBase:
        return ProcessingSpeedScorer(max_trials)

    def allowed_time_ms(self, age: float) -> Optional[int]:
        # Younger children get a wider window
        if 5 <= age <= 7:
            return self.rng.randint(15000, 30000)
        return self.rng.randint(5000, 10000)

    def build_session(self, trial, responses, *, success, trial_number, response_time,
                      completed_on_time, allowed_time):
        return TimedRecallSession(
            trial_number=trial_number,
            success=success,
            response_time=response_time,
            sequence_length=len(trial.sequence),
            grid_size=self.grid_size,
            total_rounds=trial_number,
            completed_on_time=completed_on_time,
            allowed_time=allowed_time or 0,
        )

    def feedback(self, trial, session) -> str:
        if session.success and not session.completed_on_time:
            return "Correct, but time ran out."
        return super().feedback(trial, session)

class StroopGame(TrialGame):
    mode = "chameleon"
    skill = "attention"

    def create_scorer(self, max_trials: int) -> ScorerBase:
        return AttentionScorer(max_trials)

    def next_trial(self, trial_index: int) -> StroopTrial:
        word = self.rng.choice(COLOR_NAMES)
        is_congruent = self.rng.random() < CONGRUENT_PROBABILITY
        if is_congruent:
            ink = word
        else:
            ink = self.rng.choice([c for c in COLOR_NAMES if c != word])
        return StroopTrial(word=word, ink_color=ink, is_congruent=is_congruent)

    def normalize_response(self, trial: StroopTrial, unit: Any) -> Optional[str]:
        if not isinstance(unit, str):
            return None
        color = unit.strip().upper()
        return color if color in COLORS else None

    def evaluate(self, trial: StroopTrial, responses: List[str]) -> Verdict:
        return Verdict.SUCCESS if responses[-1] == trial.ink_color else Verdict.FAILURE

    def build_session(self, trial, responses, *, success, trial_number, response_time,
                      completed_on_time, allowed_time):
        return StroopSession(
            trial_number=trial_number,
            is_correct=success,
            response_time=response_time,
            is_congruent=trial.is_congruent,
            word_shown=trial.word,
            ink_color=trial.ink_color,
            selected_color=responses[-1],
        )

    def feedback(self, trial, session) -> str:
        if session.is_correct:
            return "Correct!"
        return f"Incorrect. The word was {trial.ink_color.lower()} ink."

class PhonicsGame(TrialGame):
    mode = "phonics"
    skill = "auditory_processing"
    settle_delay_ms = 3000
    requires_speech = True

    def __init__(self, word_bank: Sequence[PhonicsTrial] = None, rng=None):
        super().__init__(rng)
        self.word_bank = list(word_bank or WORD_BANK)
        self.used_words: List[str] = []

    def create_scorer(self, max_trials: int) -> ScorerBase:
        return AuditoryProcessingScorer(max_trials)

    def reset(self) -> None:
        self.used_words = []

    def next_trial(self, trial_index: int) -> PhonicsTrial:
        available = [w for w in self.word_bank if w.word not in self.used_words]
        if not available:
            self.used_words = []
            available = self.word_bank
        entry = self.rng.choice(available)
        self.used_words.append(entry.word)
        return entry

    def speech_text(self, trial: PhonicsTrial) -> Optional[str]:
        return trial.word

    def normalize_response(self, trial: PhonicsTrial, unit: Any) -> Optional[str]:
        if not isinstance(unit, str) or not unit.strip():
            return None
        return unit.strip()

    def evaluate(self, trial: PhonicsTrial, responses: List[str]) -> Verdict:
        if responses[-1].lower() == trial.word.lower():
            return Verdict.SUCCESS
        return Verdict.FAILURE

    def build_session(self, trial, responses, *, success, trial_number, response_time,
                      completed_on_time, allowed_time):
        spelling = responses[-1]
        accuracy = positional_accuracy(trial.word, spelling)
        return SpellingSession(
            trial_number=trial_number,
            is_correct=success,
            response_time=response_time,
            word=trial.word,
            user_spelling=spelling,
            partial_credit=1.0 if success else accuracy,
            phoneme_accuracy=accuracy,
        )

    def feedback(self, trial, session) -> str:
        if session.is_correct:
            return "🎉 Perfect spelling!"
        percent = int(round_half_up(session.phoneme_accuracy * 100))
        return (
            f'Not quite right. The word was "{trial.word}". '
            f"You got {percent}% of the sounds right!"
        )

def build_game(kind: str, *, grid_size: int = 3, rng=None) -> TrialGame:
    games: Dict[str, Callable[[], TrialGame]] = {
        "recall": lambda: SequenceRecallGame(grid_size, rng),
        "timed_recall": lambda: TimedRecallGame(grid_size, rng),
        "stroop": lambda: StroopGame(rng),
        "phonics": lambda: PhonicsGame(rng=rng),
    }
    if kind not in games:
        raise ValueError(f"Unknown game kind: {kind}")
    return games[kind]()
