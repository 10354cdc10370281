# services/similarity.py

from collections import Counter

def positional_accuracy(correct_word: str, attempt: str) -> float:
    """
    Share of aligned positions holding the same letter.

    Used for the live "sounds right" figure shown after each spelling and
    stored on the session as its phoneme accuracy.
    """
    correct = correct_word.lower()
    user = attempt.lower()

    if correct == user:
        return 1.0
    if len(user) == 0:
        return 0.0

    matches = sum(1 for a, b in zip(correct, user) if a == b)
    return matches / max(len(correct), len(user))

def letter_presence_accuracy(correct_word: str, attempt: str) -> float:
    correct = correct_word.lower()
    if not correct:
        return 0.0
    # Each letter of the attempt can be matched once
    common = Counter(correct) & Counter(attempt.lower())
    return sum(common.values()) / len(correct)

def phoneme_accuracy(correct_word: str, attempt: str) -> float:
    """
    Blend of positional accuracy (70%) and letter presence (30%).

    Returns a value in [0, 1]. Exact matches (ignoring case) score 1.0 and an
    empty attempt scores 0.0.
    """
    correct = correct_word.lower()
    user = attempt.lower()

    if correct == user:
        return 1.0
    if len(user) == 0:
        return 0.0

    return (
        positional_accuracy(correct, user) * 0.7
        + letter_presence_accuracy(correct, user) * 0.3
    )

def partial_credit(correct_word: str, attempt: str) -> float:
    if correct_word.lower() == attempt.lower():
        return 1.0

    accuracy = phoneme_accuracy(correct_word, attempt)

    if accuracy > 0.8:
        return 0.8
    if accuracy > 0.6:
        return 0.6
    if accuracy > 0.4:
        return 0.4
    if accuracy > 0.2:
        return 0.2
    return 0.0
