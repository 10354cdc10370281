# services/scorers.py

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Sequence, Tuple, TypeVar

from jiwer import cer

from models.sessions import RecallSession, SpellingSession, StroopSession, TimedRecallSession
from services.similarity import partial_credit

SessionT = TypeVar("SessionT")

def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves towards +infinity, the way browsers round scores."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor

def clamp_score(value: float) -> int:
    return int(min(max(round_half_up(value), 0), 100))

def score_interpretation(score: float) -> str:
    if score >= 90:
        return "Exceptional"
    if score >= 80:
        return "Superior"
    if score >= 70:
        return "Above Average"
    if score >= 60:
        return "Average"
    if score >= 50:
        return "Below Average"
    if score >= 40:
        return "Low"
    return "Very Low"

def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0

class ScorerBase(ABC, Generic[SessionT]):
    """
    Append-only list of trial sessions plus the trial count that sets the
    value of a single trial (100 / max_trials).
    """

    default_max_trials = 5

    def __init__(self, max_trials: int = None):
        self.max_trials = max_trials if max_trials is not None else self.default_max_trials
        self._sessions: List[SessionT] = []

    @property
    def sessions(self) -> Tuple[SessionT, ...]:
        return tuple(self._sessions)

    @property
    def points_per_trial(self) -> float:
        return 100 / self.max_trials

    def add_session(self, session: SessionT) -> None:
        self._sessions.append(session)

    def set_max_trials(self, max_trials: int) -> None:
        self.max_trials = max_trials

    def reset(self) -> None:
        self._sessions = []

    def get_score_interpretation(self, score: float) -> str:
        return score_interpretation(score)

    def average_response_time(self) -> float:
        if not self._sessions:
            return 0.0
        return sum(s.response_time for s in self._sessions) / len(self._sessions)

    @abstractmethod
    def calculate_score(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def get_detailed_analysis(self) -> Dict[str, Any]:
        raise NotImplementedError

class WorkingMemoryScorer(ScorerBase[RecallSession]):
    default_max_trials = 15

    def calculate_score(self) -> int:
        if not self._sessions:
            return 0

        # Equal weight: each successful trial is worth 100 / max_trials
        total = sum(self.points_per_trial for s in self._sessions if s.success)
        return clamp_score(total)

    def get_detailed_analysis(self) -> Dict[str, Any]:
        score = self.calculate_score()
        successful = sum(1 for s in self._sessions if s.success)

        return {
            "total_sessions": len(self._sessions),
            "successful_sessions": successful,
            "success_rate": round_half_up(_percent(successful, len(self._sessions)), 1),
            "score": score,
            "interpretation": self.get_score_interpretation(score),
        }

class ProcessingSpeedScorer(ScorerBase[TimedRecallSession]):
    def __init__(self, max_trials: int = None, timeout_penalty: float = 15):
        super().__init__(max_trials)
        self.timeout_penalty = timeout_penalty

    def set_timeout_penalty(self, penalty: float) -> None:
        self.timeout_penalty = penalty

    def calculate_score(self) -> int:
        if not self._sessions:
            return 0

        total = 0.0
        for session in self._sessions:
            if not session.success:
                continue
            session_score = self.points_per_trial
            if not session.completed_on_time:
                session_score -= self.timeout_penalty
            total += max(session_score, 0)

        return clamp_score(total)

    def get_timeout_count(self) -> int:
        return sum(1 for s in self._sessions if not s.completed_on_time)

    def get_detailed_analysis(self) -> Dict[str, Any]:
        score = self.calculate_score()
        total = len(self._sessions)
        successful = sum(1 for s in self._sessions if s.success)
        timeouts = self.get_timeout_count()

        return {
            "total_sessions": total,
            "successful_sessions": successful,
            "timeout_sessions": timeouts,
            "success_rate": round_half_up(_percent(successful, total), 1),
            "timeout_rate": round_half_up(_percent(timeouts, total), 1),
            "score": score,
            "interpretation": self.get_score_interpretation(score),
        }

class AttentionScorer(ScorerBase[StroopSession]):
    slow_response_ms = 3000

    def calculate_score(self) -> int:
        if not self._sessions:
            return 0

        correct = [s for s in self._sessions if s.is_correct]
        total = len(correct) * self.points_per_trial

        # Bonus for resisting Stroop interference
        incongruent = [s for s in self._sessions if not s.is_congruent]
        if incongruent:
            accuracy = sum(1 for s in incongruent if s.is_correct) / len(incongruent)
            total += max(0, (accuracy - 0.5) * 10)

        mean_time = self.average_response_time()
        if mean_time > self.slow_response_ms:
            total -= min(10, (mean_time - self.slow_response_ms) / 500)

        return clamp_score(total)

    def _accuracy_for(self, sessions: Sequence[StroopSession]) -> int:
        if not sessions:
            return 0
        correct = sum(1 for s in sessions if s.is_correct)
        return int(round_half_up(correct / len(sessions) * 100))

    def get_congruent_accuracy(self) -> int:
        return self._accuracy_for([s for s in self._sessions if s.is_congruent])

    def get_incongruent_accuracy(self) -> int:
        return self._accuracy_for([s for s in self._sessions if not s.is_congruent])

    def get_stroop_interference(self) -> int:
        return max(0, self.get_congruent_accuracy() - self.get_incongruent_accuracy())

    def get_detailed_analysis(self) -> Dict[str, Any]:
        score = self.calculate_score()
        correct = sum(1 for s in self._sessions if s.is_correct)

        return {
            "total_sessions": len(self._sessions),
            "correct_sessions": correct,
            "accuracy": round_half_up(_percent(correct, len(self._sessions)), 1),
            "congruent_accuracy": self.get_congruent_accuracy(),
            "incongruent_accuracy": self.get_incongruent_accuracy(),
            "stroop_interference": self.get_stroop_interference(),
            "score": score,
            "interpretation": self.get_score_interpretation(score),
        }

class AuditoryProcessingScorer(ScorerBase[SpellingSession]):
    quick_response_ms = 10000

    def calculate_score(self) -> int:
        if not self._sessions:
            return 0

        points = self.points_per_trial
        total = 0.0

        for session in self._sessions:
            if session.is_correct:
                total += points
            else:
                total += points * partial_credit(session.word, session.user_spelling)

            # Stored phoneme accuracy earns up to 5 points either way
            total += session.phoneme_accuracy * 5

        mean_time = self.average_response_time()
        if mean_time < self.quick_response_ms:
            total += min(10, (self.quick_response_ms - mean_time) / 1000)

        return clamp_score(total)

    def get_phoneme_accuracy(self) -> int:
        if not self._sessions:
            return 0
        mean = sum(s.phoneme_accuracy for s in self._sessions) / len(self._sessions)
        return int(round_half_up(mean * 100))

    def get_spelling_accuracy(self) -> int:
        if not self._sessions:
            return 0
        correct = sum(1 for s in self._sessions if s.is_correct)
        return int(round_half_up(correct / len(self._sessions) * 100))

    def get_average_response_time(self) -> int:
        return int(round_half_up(self.average_response_time()))

    def get_character_error_rate(self) -> float:
        """Mean character error rate of the spellings against their words."""
        if not self._sessions:
            return 0.0
        rates = []
        for session in self._sessions:
            spelling = session.user_spelling.lower().strip()
            if not spelling:
                rates.append(1.0)
                continue
            rates.append(cer(session.word.lower(), spelling))
        return round(sum(rates) / len(rates), 3)

    def get_detailed_analysis(self) -> Dict[str, Any]:
        score = self.calculate_score()

        return {
            "total_sessions": len(self._sessions),
            "perfect_spellings": sum(1 for s in self._sessions if s.is_correct),
            "spelling_accuracy": self.get_spelling_accuracy(),
            "phoneme_accuracy": self.get_phoneme_accuracy(),
            "average_response_time": self.get_average_response_time(),
            "character_error_rate": self.get_character_error_rate(),
            "score": score,
            "interpretation": self.get_score_interpretation(score),
        }
