"""NFA to minimal DFA pipeline.

Stages, each a pure function returning a new automaton:

1. ``expand_unit_labels``: multi-character labels become chains of
   single-character transitions through fresh intermediate states.
2. ``epsilon_closure``: states reachable through epsilon moves alone.
3. ``to_dfa``: subset construction over canonical ``StateSet`` values.
4. ``minimize``: partition refinement over the reachable DFA states.
"""
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Tuple

from .errors import ValidationError
from .finite import DFA, NFA
from .symbols import EPSILON, symbol_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class StateSet:
    """A set of NFA states kept as a sorted tuple, so equal sets compare and hash equal."""
    members: Tuple[str, ...]

    @classmethod
    def of(cls, states):
        return cls(tuple(sorted(set(states))))

    @property
    def name(self):
        return "{" + ",".join(self.members) + "}"

    def __iter__(self):
        return iter(self.members)

    def __len__(self):
        return len(self.members)

    def __contains__(self, state):
        return state in self.members


@dataclass(frozen=True)
class SubsetStep:
    """One row of the subset construction: a subset, a symbol, and where it leads."""
    subset: StateSet
    symbol: str
    moved: StateSet
    closed: StateSet
    is_new: bool


@dataclass(frozen=True)
class RefinementRound:
    number: int
    before: Tuple[Tuple[str, ...], ...]
    after: Tuple[Tuple[str, ...], ...]

    @property
    def split(self):
        return len(self.after) != len(self.before)


@dataclass(frozen=True)
class PipelineResult:
    unit_nfa: NFA
    dfa: DFA
    minimal_dfa: DFA


def _fresh_name(taken, base):
    name = base
    suffix = 1
    while name in taken:
        name = f"{base}_{suffix}"
        suffix += 1
    taken.add(name)
    return name


def _sorted_items(nfa):
    return sorted(nfa.transitions.items(), key=lambda item: (item[0][0], symbol_text(item[0][1])))


def expand_unit_labels(nfa):
    """Rewrite every multi-character label as a chain of one-character transitions.

    The chain starts at the transition's source and ends at its target; epsilon
    and single-character labels are copied unchanged.
    """
    unit_alphabet = {char for symbol in nfa.alphabet for char in symbol}
    if nfa.is_unit and unit_alphabet == set(nfa.alphabet):
        return nfa

    states = set(nfa.states)
    transitions = defaultdict(set)
    chains = 0

    for (state, label), targets in _sorted_items(nfa):
        if label is EPSILON or len(label) == 1:
            transitions[(state, label)].update(targets)
            continue

        for target in sorted(targets):
            inner = [_fresh_name(states, f"{state}.{label}.{k}") for k in range(1, len(label))]
            chain = [state] + inner + [target]
            for char, here, there in zip(label, chain, chain[1:]):
                transitions[(here, char)].add(there)
            chains += 1

    logger.debug("expanded %d multi-character transitions into unit chains", chains)
    return NFA(states, unit_alphabet, transitions, nfa.start_state, nfa.final_states)


def epsilon_closure(nfa, states):
    """Compute the epsilon closure of a set of states."""
    stack = list(states)
    closure = set(stack)

    while stack:
        current_state = stack.pop()
        for next_state in nfa.targets(current_state, EPSILON):
            if next_state not in closure:
                closure.add(next_state)
                stack.append(next_state)
    return frozenset(closure)


def remove_epsilon_transitions(nfa):
    """Convert an NFA with epsilon transitions to an equivalent one without them."""
    unit = expand_unit_labels(nfa)
    # Compute epsilon closure for all states once
    closures = {state: epsilon_closure(unit, [state]) for state in unit.states}

    new_transitions = defaultdict(set)
    for state in unit.states:
        for symbol in unit.alphabet:
            for current in closures[state]:
                for next_state in unit.targets(current, symbol):
                    new_transitions[(state, symbol)].update(closures[next_state])

    new_final_states = {state for state in unit.states if closures[state] & unit.final_states}
    return NFA(unit.states, unit.alphabet, new_transitions, unit.start_state, new_final_states)


def to_dfa(nfa):
    """Convert an NFA to a DFA using subset construction.

    The empty subset is kept as an ordinary (dead) state, so the result is
    total over its alphabet.
    """
    unit = expand_unit_labels(nfa)
    alphabet = sorted(unit.alphabet)

    start = StateSet.of(epsilon_closure(unit, [unit.start_state]))
    names = {start: start.name}
    unprocessed = deque([start])
    transitions = {}
    steps = []

    while unprocessed:
        current = unprocessed.popleft()

        for symbol in alphabet:
            moved = set()
            for nfa_state in current:
                moved.update(unit.targets(nfa_state, symbol))
            closed = StateSet.of(epsilon_closure(unit, moved))

            is_new = closed not in names
            if is_new:
                names[closed] = closed.name
                unprocessed.append(closed)

            transitions[(current.name, symbol)] = closed.name
            steps.append(SubsetStep(current, symbol, StateSet.of(moved), closed, is_new))

    if len(set(names.values())) != len(names):
        raise ValidationError("State names containing ',' or braces make subset names ambiguous.")

    final_states = {name for subset, name in names.items() if any(s in unit.final_states for s in subset)}
    logger.info("subset construction produced %d DFA states from %d NFA states", len(names), len(unit.states))
    return DFA(
        names.values(),
        alphabet,
        transitions,
        start.name,
        final_states,
        subsets={name: subset.members for subset, name in names.items()},
        history=steps,
    )


def reachable_states(dfa):
    seen = {dfa.start_state}
    queue = deque([dfa.start_state])
    while queue:
        state = queue.popleft()
        for symbol in sorted(dfa.alphabet):
            target = dfa.next_state(state, symbol)
            if target is not None and target not in seen:
                seen.add(target)
                queue.append(target)
    return frozenset(seen)


def _block_name(block):
    return "[" + ", ".join(block) + "]"


def minimize(dfa):
    """Minimize the DFA by partition refinement.

    Starts from the accepting / non-accepting split of the reachable states and
    splits any block whose members move, under some symbol, into different
    blocks of the current partition. Stops after a round without splits.
    """
    alphabet = sorted(dfa.alphabet)
    reachable = reachable_states(dfa)

    accepting = tuple(sorted(s for s in reachable if s in dfa.final_states))
    rejecting = tuple(sorted(s for s in reachable if s not in dfa.final_states))
    partition = sorted(block for block in (accepting, rejecting) if block)
    rounds = []

    while True:
        block_of = {state: index for index, block in enumerate(partition) for state in block}
        refined = []

        for block in partition:
            # Group states by the blocks their transitions lead into; -1 marks a missing transition
            groups = {}
            for state in block:
                signature = tuple(block_of.get(dfa.next_state(state, symbol), -1) for symbol in alphabet)
                groups.setdefault(signature, []).append(state)
            refined.extend(tuple(group) for group in groups.values())

        refined.sort()
        rounds.append(RefinementRound(len(rounds) + 1, tuple(partition), tuple(refined)))
        if len(refined) == len(partition):
            break
        partition = refined

    names = {state: _block_name(block) for block in partition for state in block}
    transitions = {}
    final_states = set()
    for block in partition:
        representative = block[0]
        name = names[representative]
        if representative in dfa.final_states:
            final_states.add(name)
        for symbol in alphabet:
            target = dfa.next_state(representative, symbol)
            if target is not None:
                transitions[(name, symbol)] = names[target]

    logger.info("DFA minimization complete: reduced from %d to %d states", len(dfa.states), len(partition))
    return DFA(
        {names[block[0]] for block in partition},
        alphabet,
        transitions,
        names[dfa.start_state],
        final_states,
        subsets={_block_name(block): block for block in partition},
        history=rounds,
    )


def pipeline(nfa):
    """Run every stage: unit expansion, subset construction, minimization."""
    unit = expand_unit_labels(nfa)
    dfa = to_dfa(unit)
    return PipelineResult(unit_nfa=unit, dfa=dfa, minimal_dfa=minimize(dfa))
