"""Finite automata: the epsilon-NFA model, its acceptance search, and the DFA model."""
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Optional, Tuple

from .errors import ValidationError
from .symbols import EPSILON, symbol_text

logger = logging.getLogger(__name__)


def _require_declared(names, declared, what):
    missing = sorted(set(names) - declared)
    if missing:
        raise ValidationError(f"{what} '{missing[0]}' is not declared.")


def _as_text(word):
    """FA words are matched by substring, so token sequences are joined."""
    if isinstance(word, str):
        return word
    return "".join(word)


class NFA:
    """Represents an NFA with states, alphabet, transitions, start and final states.

    ``transitions`` maps ``(state, label)`` to a set of destination states. A
    label is ``EPSILON`` or a non-empty string; multi-character labels are
    atomic and consume that exact substring of the input.
    """

    def __init__(self, states, alphabet, transitions, start_state, final_states):
        self.states = frozenset(states)
        self.start_state = start_state
        self.final_states = frozenset(final_states)

        if not self.states:
            raise ValidationError("An automaton needs at least one state.")
        if self.start_state not in self.states:
            raise ValidationError(f"Start state '{self.start_state}' is not declared.")
        _require_declared(self.final_states, self.states, "Final state")

        labels = set()
        for symbol in alphabet:
            if symbol is EPSILON:
                continue
            if not isinstance(symbol, str) or not symbol:
                raise ValidationError(f"Alphabet symbol {symbol!r} must be a non-empty string.")
            labels.add(symbol)

        table = {}
        outgoing = defaultdict(list)
        for (state, label), targets in transitions.items():
            if state not in self.states:
                raise ValidationError(f"Transition state '{state}' is not declared.")
            if label is not EPSILON:
                if not isinstance(label, str) or not label:
                    raise ValidationError(
                        f"Transition label {label!r} from '{state}' must be a non-empty string or epsilon."
                    )
                labels.add(label)
            targets = frozenset(targets)
            missing = sorted(targets - self.states)
            if missing:
                raise ValidationError(f"Destination state '{missing[0]}' from '{state}' is not declared.")
            if targets:
                table[(state, label)] = targets
                outgoing[state].append((label, targets))

        self.alphabet = frozenset(labels)
        self.transitions = MappingProxyType(table)
        self._outgoing = {state: tuple(edges) for state, edges in outgoing.items()}

    def outgoing(self, state):
        """``(label, targets)`` pairs leaving ``state``."""
        return self._outgoing.get(state, ())

    def targets(self, state, label):
        return self.transitions.get((state, label), frozenset())

    @property
    def has_epsilon(self):
        return any(label is EPSILON for (_, label) in self.transitions)

    @property
    def is_unit(self):
        """True when every non-epsilon label is exactly one character long."""
        return all(label is EPSILON or len(label) == 1 for (_, label) in self.transitions)

    def edges(self):
        """Flat, sorted ``(state, label, target)`` triples for tables and diagrams."""
        rows = []
        for (state, label), targets in self.transitions.items():
            for target in targets:
                rows.append((state, label, target))
        return sorted(rows, key=lambda row: (row[0], symbol_text(row[1]), row[2]))

    def __repr__(self):
        return (
            f"NFA(states={len(self.states)}, alphabet={sorted(self.alphabet)}, "
            f"start={self.start_state!r}, final={sorted(self.final_states)})"
        )


@dataclass(frozen=True)
class EvaluationResult:
    accepted: bool
    explored: FrozenSet[str]
    accepting: Optional[Tuple[str, int]]
    message: str


def evaluate(nfa, word):
    """Breadth-first acceptance search over ``(state, position)`` configurations.

    Epsilon edges keep the position; a labelled edge applies only when its
    label occurs in the word starting exactly at the current position. The
    search stops at the first accepting configuration, so the path found need
    not be the shortest one.
    """
    text = _as_text(word)
    start = (nfa.start_state, 0)
    queue = deque([start])
    visited = {start}
    explored = set()

    while queue:
        state, position = queue.popleft()
        explored.add(state)

        if position == len(text) and state in nfa.final_states:
            logger.info("NFA accepted %r in state %s after exploring %d configurations", text, state, len(visited))
            return EvaluationResult(
                accepted=True,
                explored=frozenset(explored),
                accepting=(state, position),
                message=f"Word '{text}' is ACCEPTED.\nEnded in accepting state: {state}",
            )

        # An end-of-word configuration still follows its epsilon edges
        for label, targets in nfa.outgoing(state):
            if label is EPSILON:
                next_position = position
            elif text.startswith(label, position):
                next_position = position + len(label)
            else:
                continue
            for target in sorted(targets):
                configuration = (target, next_position)
                if configuration not in visited:
                    visited.add(configuration)
                    queue.append(configuration)

    logger.info("NFA rejected %r after exploring %d configurations", text, len(visited))
    return EvaluationResult(
        accepted=False,
        explored=frozenset(explored),
        accepting=None,
        message=f"Word '{text}' is REJECTED.\nExplored states: {', '.join(sorted(explored))}",
    )


class DFA:
    """Deterministic automaton: ``transitions`` maps ``(state, symbol)`` to one state.

    ``subsets`` records, for derived automata, which source states each state
    stands for; ``history`` holds the construction trace of the transformation
    that produced it.
    """

    def __init__(self, states, alphabet, transitions, start_state, final_states, subsets=None, history=()):
        self.states = frozenset(states)
        self.alphabet = frozenset(alphabet)
        self.start_state = start_state
        self.final_states = frozenset(final_states)

        if self.start_state not in self.states:
            raise ValidationError(f"Start state '{self.start_state}' is not declared.")
        _require_declared(self.final_states, self.states, "Final state")
        for symbol in self.alphabet:
            if symbol is EPSILON or not isinstance(symbol, str) or not symbol:
                raise ValidationError(f"DFA alphabet symbol {symbol!r} must be a non-empty string.")

        table = {}
        for (state, symbol), target in transitions.items():
            if state not in self.states:
                raise ValidationError(f"Transition state '{state}' is not declared.")
            if symbol not in self.alphabet:
                raise ValidationError(f"Transition symbol '{symbol}' from '{state}' is not in the alphabet.")
            if target not in self.states:
                raise ValidationError(f"Destination state '{target}' from '{state}' is not declared.")
            table[(state, symbol)] = target

        self.transitions = MappingProxyType(table)
        self.subsets = MappingProxyType(dict(subsets or {}))
        self.history = tuple(history)

    def next_state(self, state, symbol):
        return self.transitions.get((state, symbol))

    @property
    def is_complete(self):
        return all((state, symbol) in self.transitions for state in self.states for symbol in self.alphabet)

    def as_nfa(self):
        """The same automaton in the NFA shape, ready for further transformation."""
        return NFA(
            self.states,
            self.alphabet,
            {key: {target} for key, target in self.transitions.items()},
            self.start_state,
            self.final_states,
        )

    def __repr__(self):
        return (
            f"DFA(states={len(self.states)}, alphabet={sorted(self.alphabet)}, "
            f"start={self.start_state!r}, final={sorted(self.final_states)})"
        )


@dataclass(frozen=True)
class DFARun:
    accepted: bool
    steps: Tuple[Tuple[str, str, str], ...]
    message: str


def run_dfa(dfa, word):
    """Test the DFA with a given input word and return the verdict with its trace."""
    current_state = dfa.start_state
    steps = []

    for symbol in word:
        if symbol not in dfa.alphabet:
            return DFARun(False, tuple(steps), f"Error: Symbol '{symbol}' is not in the alphabet {sorted(dfa.alphabet)}")
        next_state = dfa.next_state(current_state, symbol)
        if next_state is None:
            return DFARun(
                False, tuple(steps), f"Error: No transition defined for state {current_state} with symbol '{symbol}'"
            )
        steps.append((current_state, symbol, next_state))
        current_state = next_state

    accepted = current_state in dfa.final_states
    shown = _as_text(word)
    if accepted:
        message = f"Word '{shown}' is ACCEPTED by the DFA.\nEnded in accepting state: {current_state}"
    else:
        message = f"Word '{shown}' is REJECTED by the DFA.\nEnded in non-accepting state: {current_state}"
    return DFARun(accepted, tuple(steps), message)
