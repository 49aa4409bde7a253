import pytest

from automaton_lab.config import Settings, load_settings
from automaton_lab.errors import ValidationError


def test_defaults_without_environment() -> None:
    settings = load_settings({})

    assert settings == Settings()
    assert settings.blank_text == "#"
    assert settings.epsilon_text == "eps"
    assert settings.pda_max_steps == 10_000
    assert settings.tape_window_radius == 10


def test_environment_overrides() -> None:
    settings = load_settings({
        "AUTOMATON_LAB_PDA_MAX_STEPS": "500",
        "AUTOMATON_LAB_EPSILON_TEXTS": "lambda, λ",
        "AUTOMATON_LAB_BLANK_TEXT": " _ ",
        "UNRELATED": "ignored",
    })

    assert settings.pda_max_steps == 500
    assert settings.epsilon_texts == ("lambda", "λ")
    assert settings.is_epsilon_text(" λ ")
    assert not settings.is_epsilon_text("eps")
    assert settings.blank_text == "_"


@pytest.mark.parametrize("raw", ["ten", "0", "-5"])
def test_invalid_integers_are_rejected(raw) -> None:
    with pytest.raises(ValidationError, match="AUTOMATON_LAB_RUN_MAX_STEPS"):
        load_settings({"AUTOMATON_LAB_RUN_MAX_STEPS": raw})


def test_blank_cannot_double_as_epsilon() -> None:
    with pytest.raises(ValidationError):
        load_settings({"AUTOMATON_LAB_BLANK_TEXT": "eps"})


def test_empty_epsilon_list_is_rejected() -> None:
    with pytest.raises(ValidationError):
        load_settings({"AUTOMATON_LAB_EPSILON_TEXTS": " , "})


def test_log_level_is_normalised() -> None:
    assert load_settings({"AUTOMATON_LAB_LOG_LEVEL": " debug "}).log_level == "DEBUG"


def test_unknown_log_level_is_rejected() -> None:
    with pytest.raises(ValidationError, match="AUTOMATON_LAB_LOG_LEVEL"):
        load_settings({"AUTOMATON_LAB_LOG_LEVEL": "verbose"})
