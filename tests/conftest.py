"""
Pytest configuration and fixtures for automaton_lab tests.

Provides small hand-built machines shared by the engine, notation and
display tests.
"""

import pytest

from automaton_lab.symbols import BLANK, EPSILON, Action, Move


@pytest.fixture
def unary_copy_definition():
    """
    Two-tape machine copying a unary number from tape 1 onto tape 2.

    e0 (1,#) -> (->, 1->, e0) and e0 (#,#) -> (, , ef), with ef accepting.
    """
    from automaton_lab.turing import TuringMachineDefinition, TuringTransition

    return TuringMachineDefinition.build(
        states={"e0", "ef"},
        start_state="e0",
        accept_states={"ef"},
        transitions=[
            TuringTransition("e0", ("1", BLANK), (Action(None, Move.RIGHT), Action("1", Move.RIGHT)), "e0"),
            TuringTransition("e0", (BLANK, BLANK), (Action(), Action()), "ef"),
        ],
        tape_count=2,
    )


@pytest.fixture
def epsilon_ab_nfa():
    """
    NFA accepting exactly "ab" along two paths.

    q0 -ε-> q1, q1 -"ab"-> q2 -ε-> q4, q1 -a-> q3 -b-> q4.
    """
    from automaton_lab.finite import NFA

    return NFA(
        states={"q0", "q1", "q2", "q3", "q4"},
        alphabet={"a", "b"},
        transitions={
            ("q0", EPSILON): {"q1"},
            ("q1", "ab"): {"q2"},
            ("q1", "a"): {"q3"},
            ("q3", "b"): {"q4"},
            ("q2", EPSILON): {"q4"},
        },
        start_state="q0",
        final_states={"q4"},
    )


@pytest.fixture
def parentheses_pda():
    """Balanced parentheses; accepts by popping the base symbol on ε once input is done."""
    from automaton_lab.pushdown import PDA, PushdownTransition

    return PDA(
        states={"q0", "q1"},
        start_state="q0",
        accept_states={"q1"},
        initial_stack_symbol="Z",
        transitions=[
            PushdownTransition("q0", "(", "Z", "q0", ("(", "Z")),
            PushdownTransition("q0", "(", "(", "q0", ("(", "(")),
            PushdownTransition("q0", ")", "(", "q0", ()),
            PushdownTransition("q0", EPSILON, "Z", "q1", ()),
        ],
    )
