"""Text notation for machines, as typed into the front-end.

Turing machine transitions::

    e0 (1,#) -> (->, 1->, e0)

reads one symbol per tape, then gives one action token per tape followed by
the next state. Action tokens: empty (no write, stay), ``->`` / ``<-`` (move
only), ``X->`` / ``X<-`` (write then move), ``X|R`` or ``X&L`` (explicit
move), and a bare ``X`` (write, stay).

Finite automaton transitions::

    q1, ab -> q2, q3

Pushdown automaton transitions (read, pop, then target and push string)::

    q0, (, Z -> q0, (Z

Epsilon is written with any of the configured epsilon tokens (``eps``, ``ε``,
``^`` by default); the blank symbol is ``#`` by default.
"""
import re
from collections import defaultdict

from .config import Settings
from .errors import ValidationError
from .finite import NFA
from .pushdown import PDA, PushdownTransition
from .symbols import BLANK, EPSILON, Action, Move
from .turing import TuringMachineDefinition, TuringTransition

STATE_NAME = r"[a-zA-Z][\w-]*"
TM_LINE = re.compile(rf"^({STATE_NAME})\s*\(([^)]*)\)\s*->\s*\(([^)]*)\)$")
TAPE_LINE = re.compile(rf"^({STATE_NAME})\s*=\s*\[(.*)\]$")

MOVES = {
    "R": Move.RIGHT, "->": Move.RIGHT, "RIGHT": Move.RIGHT, "DERECHA": Move.RIGHT,
    "L": Move.LEFT, "<-": Move.LEFT, "LEFT": Move.LEFT, "IZQUIERDA": Move.LEFT,
    "S": Move.STAY, "STAY": Move.STAY, "QUIETO": Move.STAY, "": Move.STAY,
}


def split_fields(value):
    return [part.strip() for part in value.split(",")]


def _lines(text):
    """Non-empty lines with their 1-based numbers; ``//`` starts a comment line."""
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if line and not line.startswith("//"):
            yield number, line


def parse_symbol_list(text):
    """Comma-separated names, empty entries dropped."""
    return [name for name in split_fields(text) if name]


def tape_symbol(token, settings):
    token = token.strip()
    if token == "" or token == settings.blank_text:
        return BLANK
    return token


def parse_tape_definitions(raw, settings=None):
    """Parse ``tape1=[>,1,#]`` lines into ``(name, symbols)`` pairs."""
    settings = settings or Settings()
    lines = [(number, line.strip()) for number, line in enumerate(raw.split("\n"), start=1)]
    lines = [(number, line) for number, line in lines if line and not line.startswith("#")]

    if not lines:
        raise ValidationError("Define at least one tape.")

    tapes = []
    for index, line in lines:
        match = TAPE_LINE.match(line)
        if not match:
            raise ValidationError("Invalid tape format. Use: tape1=[>,1,#]", line=index)
        name = match.group(1)
        fields = split_fields(match.group(2))
        if len(fields) == 1 and fields[0] == "":
            raise ValidationError(f"Tape {name} cannot be empty.", line=index)
        tapes.append((name, [tape_symbol(field, settings) for field in fields]))
    return tapes


def normalize_move(raw):
    move = MOVES.get(raw.strip().upper())
    if move is None:
        raise ValidationError(f"Invalid move: {raw}")
    return move


def parse_action_token(raw, settings=None):
    settings = settings or Settings()
    token = raw.strip()

    def written(text):
        text = text.strip()
        return tape_symbol(text, settings) if text else None

    if token == "":
        return Action(None, Move.STAY)

    for separator in ("|", "&"):
        if separator in token:
            write_part, move_part = token.split(separator, 1)
            return Action(written(write_part), normalize_move(move_part or "S"))

    if token == "->":
        return Action(None, Move.RIGHT)
    if token == "<-":
        return Action(None, Move.LEFT)
    if token.endswith("->"):
        return Action(written(token[:-2]), Move.RIGHT)
    if token.endswith("<-"):
        return Action(written(token[:-2]), Move.LEFT)

    return Action(written(token), Move.STAY)


def parse_transition_line(line, settings=None):
    """Parse one Turing machine transition line."""
    settings = settings or Settings()
    match = TM_LINE.match(line.strip())
    if not match:
        raise ValidationError("Invalid format. Use: e0 (>,>) -> (->, 1->, e1)")

    source = match.group(1)
    reads = tuple(tape_symbol(field, settings) for field in split_fields(match.group(2)))
    right = split_fields(match.group(3))

    if len(right) < 2:
        raise ValidationError("The right-hand side needs one action per tape and the next state.")
    target = right[-1]
    if not target:
        raise ValidationError("The next state must close the transition.")

    actions = tuple(parse_action_token(token, settings) for token in right[:-1])
    return TuringTransition(source, reads, actions, target)


def _action_token(action, settings):
    write = ""
    if action.write is BLANK:
        write = settings.blank_text
    elif action.write is not None:
        write = action.write

    if action.move is Move.RIGHT:
        return f"{write}->"
    if action.move is Move.LEFT:
        return f"{write}<-"
    return write


def format_transition(transition, settings=None):
    """Render a Turing machine transition back into its line notation."""
    settings = settings or Settings()
    reads = ", ".join(settings.blank_text if s is BLANK else s for s in transition.reads)
    actions = ", ".join(_action_token(action, settings) for action in transition.actions)
    return f"{transition.source} ({reads}) -> ({actions}, {transition.target})"


def parse_turing_transitions(text, settings=None):
    transitions = []
    for number, line in _lines(text):
        try:
            transitions.append(parse_transition_line(line, settings))
        except ValidationError as exc:
            raise ValidationError(str(exc), line=number) from exc
    return transitions


def build_turing_machine(states, start_state, accept_states, transitions_text, tapes_text, settings=None):
    """Validate the editor contents into a machine definition and its input tapes."""
    settings = settings or Settings()
    tapes = parse_tape_definitions(tapes_text, settings)
    transitions = parse_turing_transitions(transitions_text, settings)
    definition = TuringMachineDefinition.build(
        states=parse_symbol_list(states),
        start_state=start_state.strip(),
        accept_states=parse_symbol_list(accept_states),
        transitions=transitions,
        tape_count=len(tapes),
    )
    return definition, [symbols for _, symbols in tapes]


def label(token, settings):
    token = token.strip()
    if settings.is_epsilon_text(token):
        return EPSILON
    if not token:
        raise ValidationError("Empty label; write epsilon explicitly.")
    return token


def parse_fa_transitions(text, settings=None):
    """Parse ``q1, ab -> q2, q3`` lines into ``(state, label) -> targets``."""
    settings = settings or Settings()
    transitions = defaultdict(set)
    for number, line in _lines(text):
        if "->" not in line:
            raise ValidationError("Invalid format. Use: q1, ab -> q2, q3", line=number)
        left, right = line.split("->", 1)
        left_fields = split_fields(left)
        if len(left_fields) != 2 or not left_fields[0]:
            raise ValidationError("The left side must be 'state, label'.", line=number)
        targets = parse_symbol_list(right)
        if not targets:
            raise ValidationError("Expected at least one destination state.", line=number)
        try:
            transitions[(left_fields[0], label(left_fields[1], settings))].update(targets)
        except ValidationError as exc:
            raise ValidationError(str(exc), line=number) from exc
    return dict(transitions)


def build_nfa(states, alphabet, start_state, final_states, transitions_text, settings=None):
    settings = settings or Settings()
    return NFA(
        parse_symbol_list(states),
        [symbol for symbol in parse_symbol_list(alphabet) if not settings.is_epsilon_text(symbol)],
        parse_fa_transitions(transitions_text, settings),
        start_state.strip(),
        parse_symbol_list(final_states),
    )


def split_push(text, stack_symbols):
    """Split a push string into stack symbols, longest known symbol first.

    Characters that start no known symbol stand for themselves; whitespace
    only separates symbols.
    """
    known = sorted({symbol for symbol in stack_symbols if symbol}, key=len, reverse=True)
    symbols = []
    position = 0
    while position < len(text):
        if text[position].isspace():
            position += 1
            continue
        symbol = next((s for s in known if text.startswith(s, position)), text[position])
        symbols.append(symbol)
        position += len(symbol)
    return tuple(symbols)


def parse_pda_transitions(text, settings=None, stack_symbols=()):
    """Parse ``q0, (, Z -> q0, (Z`` lines into pushdown transitions.

    Push strings are split against ``stack_symbols`` plus every popped symbol,
    so a multi-character symbol such as ``Z0`` stays one stack entry.
    """
    settings = settings or Settings()
    rows = []
    for number, line in _lines(text):
        if "->" not in line:
            raise ValidationError("Invalid format. Use: q0, a, Z -> q1, AZ", line=number)
        left, right = line.split("->", 1)
        left_fields = split_fields(left)
        right_fields = split_fields(right)
        if len(left_fields) != 3 or len(right_fields) not in (1, 2):
            raise ValidationError("Expected 'state, read, pop -> state, push'.", line=number)

        source, read, pop = left_fields
        push = right_fields[1] if len(right_fields) == 2 else ""
        push = "" if settings.is_epsilon_text(push) else push
        try:
            rows.append((number, source, label(read, settings), label(pop, settings), right_fields[0], push))
        except ValidationError as exc:
            raise ValidationError(str(exc), line=number) from exc

    known = set(stack_symbols)
    known.update(pop for _, _, _, pop, _, _ in rows if pop is not EPSILON)

    transitions = []
    for number, source, read, pop, target, push in rows:
        try:
            transitions.append(
                PushdownTransition(
                    source=source,
                    read=read,
                    pop=pop,
                    target=target,
                    push=split_push(push, known),
                )
            )
        except ValidationError as exc:
            raise ValidationError(str(exc), line=number) from exc
    return transitions


def build_pda(states, start_state, accept_states, initial_stack_symbol, transitions_text, settings=None):
    initial_stack_symbol = initial_stack_symbol.strip()
    return PDA(
        states=frozenset(parse_symbol_list(states)),
        start_state=start_state.strip(),
        accept_states=frozenset(parse_symbol_list(accept_states)),
        initial_stack_symbol=initial_stack_symbol,
        transitions=parse_pda_transitions(transitions_text, settings, stack_symbols=(initial_stack_symbol,)),
    )
