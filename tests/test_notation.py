import pytest

from automaton_lab import examples
from automaton_lab.config import Settings
from automaton_lab.errors import ValidationError
from automaton_lab.finite import evaluate
from automaton_lab.notation import (
    build_nfa,
    build_pda,
    build_turing_machine,
    format_transition,
    parse_action_token,
    parse_fa_transitions,
    parse_pda_transitions,
    parse_tape_definitions,
    parse_transition_line,
    parse_turing_transitions,
    split_push,
)
from automaton_lab.pushdown import SearchOutcome
from automaton_lab.pushdown import evaluate as evaluate_pda
from automaton_lab.symbols import BLANK, EPSILON, Action, Move
from automaton_lab.turing import MultiTapeTuringMachine, StepStatus


@pytest.mark.parametrize(
    "token, expected",
    [
        ("", Action(None, Move.STAY)),
        ("->", Action(None, Move.RIGHT)),
        ("<-", Action(None, Move.LEFT)),
        ("1->", Action("1", Move.RIGHT)),
        ("#<-", Action(BLANK, Move.LEFT)),
        ("X", Action("X", Move.STAY)),
        ("X|R", Action("X", Move.RIGHT)),
        ("X&izquierda", Action("X", Move.LEFT)),
        ("|L", Action(None, Move.LEFT)),
        ("a|", Action("a", Move.STAY)),
    ],
)
def test_action_tokens(token, expected) -> None:
    assert parse_action_token(token) == expected


def test_unknown_move_is_rejected() -> None:
    with pytest.raises(ValidationError, match="Invalid move"):
        parse_action_token("X|UP")


def test_transition_line() -> None:
    transition = parse_transition_line("e0 (1,#) -> (->, 1->, e0)")

    assert transition.source == "e0"
    assert transition.reads == ("1", BLANK)
    assert transition.actions == (Action(None, Move.RIGHT), Action("1", Move.RIGHT))
    assert transition.target == "e0"


def test_transition_line_with_empty_actions() -> None:
    transition = parse_transition_line("e0 (#,#) -> (, , ef)")

    assert transition.actions == (Action(), Action())
    assert transition.target == "ef"


def test_format_transition_reproduces_notation() -> None:
    line = "e0 (1, #) -> (->, 1->, e0)"
    assert format_transition(parse_transition_line(line)) == line


def test_malformed_transition_reports_line_number() -> None:
    text = "e0 (1) -> (->, e0)\n\ne0 1 -> e1"

    with pytest.raises(ValidationError, match=r"^\[Line 3\] Invalid format") as info:
        parse_turing_transitions(text)
    assert info.value.line == 3


def test_comment_lines_are_skipped() -> None:
    assert len(parse_turing_transitions("// copy\ne0 (1) -> (->, e0)")) == 1


def test_tape_definitions() -> None:
    tapes = parse_tape_definitions("tape1=[>,1,#]\ntape2=[>,,#]")

    assert tapes == [("tape1", [">", "1", BLANK]), ("tape2", [">", BLANK, BLANK])]


def test_invalid_tape_line_reports_line_number() -> None:
    with pytest.raises(ValidationError, match=r"\[Line 2\]"):
        parse_tape_definitions("tape1=[1]\ntape2 1,2")


def test_missing_tapes_are_rejected() -> None:
    with pytest.raises(ValidationError, match="at least one tape"):
        parse_tape_definitions("  \n")


def test_custom_blank_text_makes_hash_a_symbol() -> None:
    settings = Settings(blank_text="_")

    tapes = parse_tape_definitions("t=[#,_]", settings)

    assert tapes == [("t", ["#", BLANK])]


def test_unary_copy_example_runs_to_acceptance() -> None:
    example = examples.UNARY_COPY
    definition, tapes = build_turing_machine(
        example["states"], example["start_state"], example["accept_states"], example["transitions"], example["tapes"]
    )
    machine = MultiTapeTuringMachine(definition, tapes)

    assert machine.run(100).status is StepStatus.ACCEPT
    assert machine.current_state == "ef"
    assert machine.tapes[1].contents() == [">"] + ["1"] * 5


def test_binary_increment_example() -> None:
    example = examples.BINARY_INCREMENT
    definition, tapes = build_turing_machine(
        example["states"], example["start_state"], example["accept_states"], example["transitions"], example["tapes"]
    )
    machine = MultiTapeTuringMachine(definition, tapes)

    assert machine.run(100).status is StepStatus.ACCEPT
    assert machine.tapes[0].contents() == ["1", "1", "0", "0"]


def test_duplicate_turing_transitions_are_rejected() -> None:
    with pytest.raises(ValidationError, match="Non-deterministic"):
        build_turing_machine("q", "q", "", "q (a) -> (b, q)\nq (a) -> (c, q)", "t=[a]")


def test_fa_transitions_merge_targets_and_read_epsilon() -> None:
    transitions = parse_fa_transitions("q0, eps -> q1\nq1, ab -> q2\nq1, ab -> q3")

    assert transitions[("q0", EPSILON)] == {"q1"}
    assert transitions[("q1", "ab")] == {"q2", "q3"}


def test_fa_empty_label_reports_line() -> None:
    with pytest.raises(ValidationError, match=r"^\[Line 1\] Empty label"):
        parse_fa_transitions("q0,  -> q1")


def test_finite_examples_evaluate_their_sample_words() -> None:
    for example in examples.FINITE_EXAMPLES.values():
        nfa = build_nfa(
            example["states"],
            example["alphabet"],
            example["start_state"],
            example["final_states"],
            example["transitions"],
        )
        assert evaluate(nfa, example["word"]).accepted


def test_pda_line_pushes_characters_and_maps_epsilon() -> None:
    first, second = parse_pda_transitions("q0, (, Z -> q0, (Z\nq0, ), ( -> q0, eps")

    assert first.push == ("(", "Z")
    assert second.push == ()
    assert second.read == ")"


def test_pda_line_without_push_pushes_nothing() -> None:
    (transition,) = parse_pda_transitions("q, ^, Z -> f")

    assert transition.read is EPSILON
    assert transition.push == ()


def test_pda_line_with_missing_field_reports_line() -> None:
    with pytest.raises(ValidationError, match=r"\[Line 2\]"):
        parse_pda_transitions("q, a, Z -> q, AZ\nq, a -> q")


def test_pushdown_examples_accept_their_sample_words() -> None:
    for example in examples.PUSHDOWN_EXAMPLES.values():
        pda = build_pda(
            example["states"],
            example["start_state"],
            example["accept_states"],
            example["initial_stack_symbol"],
            example["transitions"],
        )
        assert evaluate_pda(pda, example["word"]).outcome is SearchOutcome.ACCEPTED


def test_push_strings_keep_multi_character_stack_symbols() -> None:
    assert split_push("(Z0", {"Z0"}) == ("(", "Z0")
    assert split_push("ABA", {"A", "AB"}) == ("AB", "A")
    assert split_push("X Y", set()) == ("X", "Y")


def test_multi_character_base_symbol_balanced_parentheses() -> None:
    pda = build_pda(
        "q0, q1",
        "q0",
        "q1",
        "Z0",
        "q0, (, Z0 -> q0, (Z0\nq0, (, ( -> q0, ((\nq0, ), ( -> q0, eps\nq0, eps, Z0 -> q1, eps",
    )

    assert pda.transitions[0].push == ("(", "Z0")
    assert evaluate_pda(pda, "()").accepted
    assert evaluate_pda(pda, "(())()").accepted
    assert evaluate_pda(pda, "(()").outcome is SearchOutcome.REJECTED
