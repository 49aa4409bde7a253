"""Graphviz diagrams and pandas tables built from engine models and results.

Nothing here changes a model; the front-end passes the returned ``Digraph``
and ``DataFrame`` objects straight to Streamlit.
"""
from collections import defaultdict

import graphviz
import pandas as pd

from .pushdown import stack_text
from .symbols import EPSILON, Move, symbol_text
from .transform import epsilon_closure

EMPTY_SET = "∅"


def _label(symbol, blank_text="#"):
    return symbol_text(symbol, blank_text=blank_text, epsilon_text="ε")


def _new_digraph(title):
    dot = graphviz.Digraph(comment=title)
    dot.attr(rankdir='LR')  # Left to right layout
    return dot


def _add_states(dot, states, final_states, start_state, highlight=None):
    for state in sorted(states):
        attrs = {"shape": "doublecircle" if state in final_states else "circle"}
        if state == highlight:
            attrs.update(style="filled", fillcolor="#ffd54f")
        dot.node(str(state), **attrs)

    # Add a special start state pointer
    dot.node('__start__', shape='none', label='')
    dot.edge('__start__', str(start_state))


def _add_grouped_edges(dot, labelled_edges, highlight_edge=None):
    """One arrow per (source, target) pair, with every label stacked on it."""
    grouped = defaultdict(list)
    for source, text, target in labelled_edges:
        grouped[(source, target)].append(text)
    for (source, target), texts in sorted(grouped.items()):
        attrs = {"label": "\n".join(texts)}
        if (source, target) == highlight_edge:
            attrs.update(color="#e53935", penwidth="2")
        dot.edge(str(source), str(target), **attrs)


def nfa_diagram(nfa, title="NFA", highlight=None):
    """Create a graphical representation of an NFA using Graphviz."""
    dot = _new_digraph(title)
    _add_states(dot, nfa.states, nfa.final_states, nfa.start_state, highlight)
    _add_grouped_edges(dot, [(s, _label(label), t) for s, label, t in nfa.edges()])
    return dot


def dfa_diagram(dfa, title="DFA"):
    dot = _new_digraph(title)
    _add_states(dot, dfa.states, dfa.final_states, dfa.start_state)
    edges = [(s, symbol, t) for (s, symbol), t in sorted(dfa.transitions.items())]
    _add_grouped_edges(dot, edges)
    return dot


def pda_diagram(pda, title="PDA"):
    dot = _new_digraph(title)
    _add_states(dot, pda.states, pda.accept_states, pda.start_state)
    edges = []
    for t in pda.transitions:
        push = "".join(t.push) or "ε"
        edges.append((t.source, f"{_label(t.read)}, {_label(t.pop)} / {push}", t.target))
    _add_grouped_edges(dot, edges)
    return dot


def _action_text(action, blank_text):
    write = "" if action.write is None else _label(action.write, blank_text)
    arrow = {Move.LEFT: "<-", Move.RIGHT: "->", Move.STAY: ""}[action.move]
    return f"{write}{arrow}" or "-"


def turing_diagram(definition, current_state=None, last_transition=None, blank_text="#"):
    """State graph of a Turing machine with the current state and last edge highlighted."""
    dot = _new_digraph("Turing machine")
    _add_states(dot, definition.states, definition.accept_states, definition.start_state, current_state)
    edges = []
    for transition in definition.relation.values():
        reads = ",".join(_label(s, blank_text) for s in transition.reads)
        actions = ",".join(_action_text(a, blank_text) for a in transition.actions)
        edges.append((transition.source, f"({reads}) / ({actions})", transition.target))
    highlight = None
    if last_transition is not None:
        highlight = (last_transition.source, last_transition.target)
    _add_grouped_edges(dot, edges, highlight)
    return dot


def _set_text(states):
    return "{" + ", ".join(sorted(str(s) for s in states)) + "}" if states else EMPTY_SET


def _state_label(state, start_state, final_states):
    label = str(state)
    if state == start_state:
        label += " (Start)"
    if state in final_states:
        label += " (Final)"
    return label


def nfa_table(nfa):
    """Transition table of an NFA; epsilon gets its own column."""
    labels = sorted(nfa.alphabet)
    if nfa.has_epsilon:
        labels = [EPSILON] + labels

    rows = []
    for state in sorted(nfa.states):
        row = {"State": _state_label(state, nfa.start_state, nfa.final_states)}
        for label in labels:
            targets = nfa.targets(state, label)
            row[_label(label)] = _set_text(targets) if targets else "-"
        rows.append(row)
    return pd.DataFrame(rows, columns=["State"] + [_label(label) for label in labels])


def dfa_table(dfa):
    """Display the DFA's transition table with start and final state markers."""
    alphabet = sorted(dfa.alphabet)
    table_data = []
    for state in sorted(dfa.states):
        row = [_state_label(state, dfa.start_state, dfa.final_states)]
        for symbol in alphabet:
            row.append(dfa.transitions.get((state, symbol), "-"))  # "-" marks no transition
        table_data.append(row)
    return pd.DataFrame(table_data, columns=["State"] + alphabet)


def closure_table(nfa):
    """ε-closure of every state."""
    data = {"State": [], "ε-closure": []}
    for state in sorted(nfa.states):
        data["State"].append(state)
        data["ε-closure"].append(_set_text(epsilon_closure(nfa, [state])))
    return pd.DataFrame(data)


def subset_table(dfa):
    """The subset construction steps recorded on a determinized automaton."""
    data = {
        "Step": [],
        "Current Subset": [],
        "Input": [],
        "Next States Before ε-closure": [],
        "Next States After ε-closure": [],
        "New DFA State?": [],
    }
    for number, step in enumerate(dfa.history, start=1):
        data["Step"].append(number)
        data["Current Subset"].append(step.subset.name)
        data["Input"].append(step.symbol)
        data["Next States Before ε-closure"].append(_set_text(step.moved.members))
        data["Next States After ε-closure"].append(_set_text(step.closed.members))
        data["New DFA State?"].append(("Yes: " if step.is_new else "No: ") + step.closed.name)
    return pd.DataFrame(data)


def _partition_text(partition):
    return " | ".join("{" + ", ".join(block) + "}" for block in partition)


def refinement_table(minimal_dfa):
    """Partition refinement rounds recorded on a minimized automaton."""
    data = {"Iteration": [], "Current Partition": [], "New Partition": [], "Split?": []}
    for round_ in minimal_dfa.history:
        data["Iteration"].append(round_.number)
        data["Current Partition"].append(_partition_text(round_.before))
        data["New Partition"].append(_partition_text(round_.after))
        data["Split?"].append("Yes" if round_.split else "No")
    return pd.DataFrame(data)


def block_table(minimal_dfa):
    data = {"Minimized DFA State": [], "States in Group": []}
    for name, members in sorted(minimal_dfa.subsets.items()):
        data["Minimized DFA State"].append(name)
        data["States in Group"].append(", ".join(members))
    return pd.DataFrame(data)


def tape_frame(snapshot, blank_text="#"):
    """One row per tape, one column per offset from the head; the head cell is bracketed."""
    rows = {}
    columns = None
    for view in snapshot.tapes:
        cells = []
        for position, symbol in view.cells:
            text = _label(symbol, blank_text)
            cells.append(f"[{text}]" if position == view.head else text)
        rows[f"Tape {view.index + 1} (head {view.head})"] = cells
        if columns is None:
            columns = [position - view.head for position, _ in view.cells]
    return pd.DataFrame.from_dict(rows, orient="index", columns=columns)


def pda_trace_table(result, word):
    data = {"Step": [], "State": [], "Remaining Input": [], "Stack (top first)": []}
    for number, configuration in enumerate(result.trace):
        remaining = word[configuration.position:]
        data["Step"].append(number)
        data["State"].append(configuration.state)
        data["Remaining Input"].append("".join(remaining) or "ε")
        data["Stack (top first)"].append(stack_text(configuration.stack))
    return pd.DataFrame(data)
