"""Nondeterministic pushdown automaton with epsilon moves.

Acceptance is by final state with the whole input consumed. The search is a
breadth-first walk over ``(state, position, stack)`` configurations bounded by
a maximum number of expanded configurations.
"""
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .errors import ValidationError
from .symbols import EPSILON, Symbol, symbol_text

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 10_000


@dataclass(frozen=True)
class PushdownTransition:
    """``(source, read, pop) -> (target, push)``; ``push[0]`` ends up on top."""
    source: str
    read: Symbol
    pop: Symbol
    target: str
    push: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "push", tuple(self.push))
        for field_name in ("read", "pop"):
            value = getattr(self, field_name)
            if value is not EPSILON and (not isinstance(value, str) or not value):
                raise ValidationError(f"Transition {field_name} symbol must be a non-empty string or epsilon.")
        if EPSILON in self.push or "" in self.push:
            raise ValidationError("Push strings hold stack symbols only; use an empty push for epsilon.")

    def describe(self):
        push = "".join(self.push) or symbol_text(EPSILON)
        return f"{self.source}, {symbol_text(self.read)}, {symbol_text(self.pop)} -> {self.target}, {push}"


@dataclass(frozen=True)
class PDA:
    states: FrozenSet[str]
    start_state: str
    accept_states: FrozenSet[str]
    initial_stack_symbol: str
    transitions: Tuple[PushdownTransition, ...]

    def __post_init__(self):
        object.__setattr__(self, "states", frozenset(self.states))
        object.__setattr__(self, "accept_states", frozenset(self.accept_states))
        object.__setattr__(self, "transitions", tuple(self.transitions))

        if self.start_state not in self.states:
            raise ValidationError(f"Start state '{self.start_state}' is not declared.")
        undeclared = sorted(self.accept_states - self.states)
        if undeclared:
            raise ValidationError(f"Accept state '{undeclared[0]}' is not declared.")
        if not isinstance(self.initial_stack_symbol, str) or not self.initial_stack_symbol:
            raise ValidationError("The initial stack symbol must be a non-empty string.")
        for transition in self.transitions:
            for state in (transition.source, transition.target):
                if state not in self.states:
                    raise ValidationError(f"Transition {transition.describe()} references undeclared state '{state}'.")


def stack_text(stack):
    """Stack contents top first; symbols are space-separated once any is longer than one character."""
    separator = " " if any(len(symbol) > 1 for symbol in stack) else ""
    return separator.join(reversed(stack)) or symbol_text(EPSILON)


@dataclass(frozen=True)
class Configuration:
    state: str
    position: int
    stack: Tuple[str, ...]

    @property
    def top(self):
        return self.stack[-1] if self.stack else None

    def describe(self, word=""):
        remaining = word[self.position:] if isinstance(word, str) else "".join(word[self.position:])
        return f"({self.state}, {remaining or symbol_text(EPSILON)}, {stack_text(self.stack)})"


class SearchOutcome(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class PDAResult:
    outcome: SearchOutcome
    configuration: Optional[Configuration]
    steps: int
    trace: Tuple[Configuration, ...]
    message: str

    @property
    def accepted(self):
        return self.outcome is SearchOutcome.ACCEPTED


def apply(transition, configuration, word):
    """Return the configuration ``transition`` leads to, or None when it does not apply."""
    position = configuration.position
    if transition.read is not EPSILON:
        if position >= len(word) or word[position] != transition.read:
            return None
        position += 1

    stack = list(configuration.stack)
    if transition.pop is not EPSILON:
        if not stack or stack[-1] != transition.pop:
            return None
        stack.pop()

    # Push in reverse so the first symbol of the push string is on top
    stack.extend(reversed(transition.push))
    return Configuration(transition.target, position, tuple(stack))


def _path(parents, configuration):
    path = [configuration]
    while parents[configuration] is not None:
        configuration = parents[configuration]
        path.append(configuration)
    return tuple(reversed(path))


def evaluate(pda, word, max_steps=None):
    """Search for an accepting run of ``pda`` on ``word``.

    Reports ``EXHAUSTED`` rather than ``REJECTED`` when the step bound stops
    the search while unexplored configurations remain.
    """
    max_steps = DEFAULT_MAX_STEPS if max_steps is None else max_steps
    if max_steps <= 0:
        raise ValueError("max_steps must be > 0")

    word = word if isinstance(word, str) else tuple(word)
    by_state = defaultdict(list)
    for transition in pda.transitions:
        by_state[transition.source].append(transition)

    start = Configuration(pda.start_state, 0, (pda.initial_stack_symbol,))
    parents = {start: None}
    queue = deque([start])
    steps = 0
    last = start

    while queue:
        if steps >= max_steps:
            logger.warning("PDA search stopped after %d steps with %d configurations pending", steps, len(queue))
            return PDAResult(
                outcome=SearchOutcome.EXHAUSTED,
                configuration=last,
                steps=steps,
                trace=(),
                message=(
                    f"Search limit of {max_steps} steps reached without acceptance; "
                    f"{len(queue)} configurations were left unexplored, so the word was not proven rejected."
                ),
            )

        configuration = queue.popleft()
        steps += 1
        last = configuration

        if configuration.position == len(word) and configuration.state in pda.accept_states:
            logger.info("PDA accepted %r in %d steps", word, steps)
            return PDAResult(
                outcome=SearchOutcome.ACCEPTED,
                configuration=configuration,
                steps=steps,
                trace=_path(parents, configuration),
                message=f"Accepted: {configuration.describe(word)} reached after {steps} steps.",
            )

        for transition in by_state[configuration.state]:
            successor = apply(transition, configuration, word)
            if successor is not None and successor not in parents:
                parents[successor] = configuration
                queue.append(successor)

    logger.info("PDA rejected %r after exploring %d configurations", word, steps)
    return PDAResult(
        outcome=SearchOutcome.REJECTED,
        configuration=last,
        steps=steps,
        trace=(),
        message=f"Rejected: all {steps} reachable configurations explored. Last: {last.describe(word)}.",
    )
