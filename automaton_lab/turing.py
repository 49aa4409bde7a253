"""Deterministic multi-tape Turing machine.

The transition relation is a partial function keyed by the current state and
the tuple of symbols under the heads. Duplicate keys are rejected when the
relation is built; the stepper itself never has to pick between candidates.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .errors import ValidationError
from .symbols import Action, Symbol, symbol_text
from .tape import SparseTape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionKey:
    state: str
    reads: Tuple[Symbol, ...]


@dataclass(frozen=True)
class TuringTransition:
    source: str
    reads: Tuple[Symbol, ...]
    actions: Tuple[Action, ...]
    target: str

    def __post_init__(self):
        # Accept lists from callers but store tuples so the transition stays hashable
        object.__setattr__(self, "reads", tuple(self.reads))
        object.__setattr__(self, "actions", tuple(self.actions))

    @property
    def key(self):
        return TransitionKey(self.source, self.reads)

    def describe(self, blank_text="#"):
        reads = ", ".join(symbol_text(s, blank_text) for s in self.reads)
        actions = []
        for action in self.actions:
            write = "" if action.write is None else symbol_text(action.write, blank_text)
            actions.append(f"{write}|{action.move.value}")
        return f"{self.source} ({reads}) -> ({', '.join(actions)}, {self.target})"


class TransitionRelation(Mapping):
    """Read-only mapping ``TransitionKey -> TuringTransition``."""

    def __init__(self, transitions, tape_count):
        self.tape_count = tape_count
        self._table = {}
        for transition in transitions:
            if len(transition.reads) != tape_count:
                raise ValidationError(
                    f"Transition {transition.describe()} reads {len(transition.reads)} "
                    f"symbols, expected {tape_count}."
                )
            if len(transition.actions) != tape_count:
                raise ValidationError(
                    f"Transition {transition.describe()} has {len(transition.actions)} "
                    f"actions, expected {tape_count}."
                )
            if transition.key in self._table:
                raise ValidationError(
                    f"Non-deterministic: duplicate transition for {transition.source} "
                    f"({', '.join(symbol_text(s) for s in transition.reads)})."
                )
            self._table[transition.key] = transition

    def __getitem__(self, key):
        return self._table[key]

    def __iter__(self):
        return iter(self._table)

    def __len__(self):
        return len(self._table)

    def lookup(self, state, reads):
        return self._table.get(TransitionKey(state, tuple(reads)))


@dataclass(frozen=True)
class TuringMachineDefinition:
    states: FrozenSet[str]
    start_state: str
    accept_states: FrozenSet[str]
    relation: TransitionRelation
    tape_count: int

    def __post_init__(self):
        object.__setattr__(self, "states", frozenset(self.states))
        object.__setattr__(self, "accept_states", frozenset(self.accept_states))

        if self.tape_count < 1:
            raise ValidationError("A Turing machine needs at least one tape.")
        if self.relation.tape_count != self.tape_count:
            raise ValidationError(
                f"Transition relation is for {self.relation.tape_count} tapes, machine has {self.tape_count}."
            )
        if self.start_state not in self.states:
            raise ValidationError(f"Start state '{self.start_state}' is not declared.")
        undeclared = sorted(self.accept_states - self.states)
        if undeclared:
            raise ValidationError(f"Accept state '{undeclared[0]}' is not declared.")
        for transition in self.relation.values():
            for state in (transition.source, transition.target):
                if state not in self.states:
                    raise ValidationError(
                        f"Transition {transition.describe()} references undeclared state '{state}'."
                    )

    @classmethod
    def build(cls, states, start_state, accept_states, transitions, tape_count):
        """Validate ``transitions`` into a relation and wrap everything in a definition."""
        relation = TransitionRelation(transitions, tape_count)
        return cls(frozenset(states), start_state, frozenset(accept_states), relation, tape_count)


class StepStatus(Enum):
    RUNNING = "running"
    ACCEPT = "accept"
    HALTED = "halted"


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    message: str


@dataclass(frozen=True)
class TapeView:
    index: int
    head: int
    cells: Tuple[Tuple[int, Symbol], ...]


@dataclass(frozen=True)
class MachineSnapshot:
    state: str
    step_count: int
    halted: bool
    halt_reason: str
    accepted: bool
    last_transition: Optional[TuringTransition]
    tapes: Tuple[TapeView, ...]


ACCEPT_REASON = "Accepted."
NO_TRANSITION_REASON = "No applicable transition."


class MultiTapeTuringMachine:
    """One caller-owned simulation: tapes, heads, current state and counters.

    Pacing is external: call ``step`` from whatever loop (or UI timer) drives
    the simulation, and stop calling it to cancel.
    """

    def __init__(self, definition, input_tapes):
        self.definition = definition
        self.tape_count = definition.tape_count
        self.initial_tapes = self._check_tapes(input_tapes)
        self.tapes = [SparseTape() for _ in range(self.tape_count)]
        self.reset()

    def _check_tapes(self, input_tapes):
        tapes = [tuple(symbols) for symbols in input_tapes]
        if len(tapes) != self.tape_count:
            raise ValidationError(f"Expected {self.tape_count} tapes, got {len(tapes)}.")
        return tapes

    def reset(self, input_tapes=None):
        """Reload the tapes and return to the start configuration."""
        if input_tapes is not None:
            self.initial_tapes = self._check_tapes(input_tapes)

        self.current_state = self.definition.start_state
        self.step_count = 0
        self.halted = False
        self.halt_reason = ""
        self.last_transition = None
        self.heads = [0] * self.tape_count
        for tape, symbols in zip(self.tapes, self.initial_tapes):
            tape.load(symbols)

    def read(self, tape_index):
        return self.tapes[tape_index].read(self.heads[tape_index])

    def write(self, tape_index, symbol):
        self.tapes[tape_index].write(self.heads[tape_index], symbol)

    @property
    def accepted(self):
        return self.halted and self.current_state in self.definition.accept_states

    def _halt(self, reason):
        self.halted = True
        self.halt_reason = reason

    def step(self):
        """Advance one configuration and report what happened."""
        if self.halted:
            return StepResult(StepStatus.HALTED, self.halt_reason or "The machine is already halted.")

        if self.current_state in self.definition.accept_states:
            self._halt(ACCEPT_REASON)
            return StepResult(StepStatus.ACCEPT, "The machine reached an accept state.")

        reads = tuple(self.read(i) for i in range(self.tape_count))
        transition = self.definition.relation.lookup(self.current_state, reads)

        if transition is None:
            self._halt(NO_TRANSITION_REASON)
            self.last_transition = None
            shown = ", ".join(symbol_text(s) for s in reads)
            logger.debug("halted in %s reading (%s) after %d steps", self.current_state, shown, self.step_count)
            return StepResult(StepStatus.HALTED, f"No transition for {self.current_state} ({shown}).")

        # Per-tape actions are independent of each other
        for tape_index, action in enumerate(transition.actions):
            if action.write is not None:
                self.write(tape_index, action.write)
            self.heads[tape_index] += action.move.offset

        self.current_state = transition.target
        self.step_count += 1
        self.last_transition = transition

        if self.current_state in self.definition.accept_states:
            self._halt(ACCEPT_REASON)
            logger.debug("accepted in %s after %d steps", self.current_state, self.step_count)
            return StepResult(StepStatus.ACCEPT, "The machine accepted the input.")

        return StepResult(StepStatus.RUNNING, "Step executed.")

    def run(self, max_steps, on_step=None):
        """Call ``step`` until the machine stops running or ``max_steps`` calls were made.

        ``on_step`` is called with every ``StepResult``, e.g. to redraw the tapes.
        """
        if max_steps <= 0:
            raise ValueError("max_steps must be > 0")

        result = StepResult(StepStatus.RUNNING, "Step executed.")
        for _ in range(max_steps):
            result = self.step()
            if on_step is not None:
                on_step(result)
            if result.status is not StepStatus.RUNNING:
                break
        else:
            logger.info("run stopped after %d steps without halting", max_steps)
        return result

    def snapshot(self, radius=10):
        """Everything a renderer needs, detached from the live machine."""
        views = tuple(
            TapeView(index=i, head=self.heads[i], cells=tuple(self.tapes[i].window(self.heads[i], radius)))
            for i in range(self.tape_count)
        )
        return MachineSnapshot(
            state=self.current_state,
            step_count=self.step_count,
            halted=self.halted,
            halt_reason=self.halt_reason,
            accepted=self.accepted,
            last_transition=self.last_transition,
            tapes=views,
        )
