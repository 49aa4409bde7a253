import pytest

from automaton_lab.errors import ValidationError
from automaton_lab.pushdown import (
    PDA,
    Configuration,
    PushdownTransition,
    SearchOutcome,
    apply,
    evaluate,
)
from automaton_lab.symbols import EPSILON


@pytest.mark.parametrize("word", ["", "()", "(())()", "((()))"])
def test_balanced_words_are_accepted(parentheses_pda, word) -> None:
    result = evaluate(parentheses_pda, word)

    assert result.outcome is SearchOutcome.ACCEPTED
    assert result.accepted
    assert result.configuration.state == "q1"
    assert result.configuration.position == len(word)


@pytest.mark.parametrize("word", ["(()", ")(", "())", "("])
def test_unbalanced_words_are_rejected(parentheses_pda, word) -> None:
    result = evaluate(parentheses_pda, word)

    assert result.outcome is SearchOutcome.REJECTED
    assert not result.accepted
    assert result.trace == ()
    assert result.message.startswith("Rejected:")


def test_trace_runs_from_start_to_accepting_configuration(parentheses_pda) -> None:
    result = evaluate(parentheses_pda, "()")

    assert result.trace[0] == Configuration("q0", 0, ("Z",))
    assert result.trace[-1] == result.configuration
    assert [c.position for c in result.trace] == [0, 1, 2, 2]
    assert result.trace[1].stack == ("Z", "(")


def test_first_push_symbol_ends_on_top() -> None:
    transition = PushdownTransition("p", EPSILON, "Z", "p", ("A", "B"))

    successor = apply(transition, Configuration("p", 0, ("Z",)), "")

    assert successor.stack == ("B", "A")
    assert successor.top == "A"


def test_epsilon_pop_leaves_stack_below() -> None:
    transition = PushdownTransition("p", "a", EPSILON, "p", ("A",))

    successor = apply(transition, Configuration("p", 0, ("Z",)), "a")

    assert successor == Configuration("p", 1, ("Z", "A"))


def test_transition_does_not_apply_past_end_or_on_wrong_top() -> None:
    reading = PushdownTransition("p", "a", EPSILON, "p")
    popping = PushdownTransition("p", EPSILON, "X", "p")
    start = Configuration("p", 0, ("Z",))

    assert apply(reading, start, "") is None
    assert apply(reading, start, "b") is None
    assert apply(popping, start, "") is None
    assert apply(popping, Configuration("p", 0, ()), "") is None


def test_unbounded_stack_growth_exhausts_search() -> None:
    pda = PDA(
        states={"p"},
        start_state="p",
        accept_states=set(),
        initial_stack_symbol="Z",
        transitions=[PushdownTransition("p", EPSILON, EPSILON, "p", ("A",))],
    )

    result = evaluate(pda, "a", max_steps=50)

    assert result.outcome is SearchOutcome.EXHAUSTED
    assert not result.accepted
    assert result.steps == 50
    assert "not proven rejected" in result.message


def test_a_n_b_n() -> None:
    pda = PDA(
        states={"p", "q", "f"},
        start_state="p",
        accept_states={"f"},
        initial_stack_symbol="Z",
        transitions=[
            PushdownTransition("p", "a", EPSILON, "p", ("A",)),
            PushdownTransition("p", EPSILON, EPSILON, "q"),
            PushdownTransition("q", "b", "A", "q"),
            PushdownTransition("q", EPSILON, "Z", "f", ("Z",)),
        ],
    )

    assert evaluate(pda, "aabb").accepted
    assert evaluate(pda, "").accepted
    assert evaluate(pda, "aab").outcome is SearchOutcome.REJECTED
    assert evaluate(pda, "abab").outcome is SearchOutcome.REJECTED


def test_token_sequence_input(parentheses_pda) -> None:
    assert evaluate(parentheses_pda, ["(", ")"]).accepted


def test_non_positive_step_bound_is_rejected(parentheses_pda) -> None:
    with pytest.raises(ValueError):
        evaluate(parentheses_pda, "()", max_steps=0)


def test_undeclared_state_is_rejected() -> None:
    with pytest.raises(ValidationError, match="undeclared state 'r'"):
        PDA({"p"}, "p", set(), "Z", [PushdownTransition("p", "a", "Z", "r")])


def test_push_cannot_contain_epsilon() -> None:
    with pytest.raises(ValidationError):
        PushdownTransition("p", "a", "Z", "p", (EPSILON,))


def test_configuration_description_shows_top_first() -> None:
    configuration = Configuration("q", 1, ("Z", "A"))

    assert configuration.describe("ab") == "(q, b, AZ)"
    assert Configuration("q", 2, ()).describe("ab") == "(q, ε, ε)"


def test_multi_character_stack_symbols_are_shown_separated() -> None:
    assert Configuration("q", 0, ("Z0", "A")).describe("") == "(q, ε, A Z0)"
