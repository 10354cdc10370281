"""Shared drivers for the trial runner tests."""

from services.trial_runner import RunnerState

class ScriptedRandom:
    """
    Stand-in for random.Random that replays queued values and records the
    arguments it was called with.
    """

    def __init__(self, randrange=None, randint=None, choice=None, random=None):
        self.randrange_values = list(randrange or [])
        self.randint_values = list(randint or [])
        self.choice_values = list(choice or [])
        self.random_values = list(random or [])
        self.calls = []

    def randrange(self, stop):
        self.calls.append(("randrange", stop))
        return self.randrange_values.pop(0) if self.randrange_values else 0

    def randint(self, a, b):
        self.calls.append(("randint", a, b))
        return self.randint_values.pop(0) if self.randint_values else a

    def choice(self, seq):
        self.calls.append(("choice", tuple(seq)))
        if self.choice_values:
            value = self.choice_values.pop(0)
            assert value in seq
            return value
        return seq[0]

    def random(self):
        self.calls.append(("random",))
        return self.random_values.pop(0) if self.random_values else 0.0

class RecordingSurface:
    def __init__(self, scheduler):
        self.scheduler = scheduler
        self.highlights = []
        self.presented = []
        self.feedback = []
        self.scores = []
        self.advances = []
        self.completed = []
        self.timeouts = 0

    def present(self, trial):
        self.presented.append(trial)

    def highlight(self, cell):
        self.highlights.append((self.scheduler.now, cell))

    def show_feedback(self, correct, message):
        self.feedback.append((correct, message))

    def on_score(self, live_score, correct_count):
        self.scores.append(live_score)

    def on_timeout(self):
        self.timeouts += 1

    def on_advance(self, trial_index):
        self.advances.append(trial_index)

    def on_complete(self, final_score):
        self.completed.append(final_score)

def wait_for_input(runner, step_ms=100, limit_ms=60000):
    waited = 0
    while runner.state is RunnerState.PRESENTING and waited < limit_ms:
        runner.scheduler.advance(step_ms)
        waited += step_ms
    assert runner.state is RunnerState.AWAITING_RESPONSE

def answer_correctly(runner):
    """Give the right answer for the current trial of any game kind."""
    trial = runner.current_trial
    if hasattr(trial, "sequence"):
        for cell in trial.sequence:
            assert runner.respond(cell)
            runner.scheduler.advance(runner.game.input_settle_ms)
    elif hasattr(trial, "ink_color"):
        assert runner.respond(trial.ink_color)
    else:
        assert runner.respond(trial.word)

def play_through(runner, answer=answer_correctly):
    """Run every remaining trial, answering each one, until completion."""
    while runner.state is not RunnerState.ASSESSMENT_COMPLETE:
        wait_for_input(runner)
        answer(runner)
        runner.scheduler.advance(runner.game.settle_delay_ms)
