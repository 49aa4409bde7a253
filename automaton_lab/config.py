"""Runtime settings for the simulators and the Streamlit front-end.

Every field has a default; ``load_settings`` overrides them from
``AUTOMATON_LAB_*`` environment variables, e.g. ``AUTOMATON_LAB_PDA_MAX_STEPS``.
"""
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Tuple

from .errors import ValidationError

ENV_PREFIX = "AUTOMATON_LAB_"


@dataclass(frozen=True)
class Settings:
    blank_text: str = "#"
    epsilon_texts: Tuple[str, ...] = ("eps", "ε", "^")
    tape_window_radius: int = 10
    run_max_steps: int = 1000
    run_delay_ms: int = 250
    pda_max_steps: int = 10_000
    log_level: str = "INFO"

    @property
    def epsilon_text(self):
        """Token used when rendering epsilon back to text."""
        return self.epsilon_texts[0]

    def is_epsilon_text(self, token):
        return token.strip() in self.epsilon_texts


def _coerce(name, raw, current):
    if isinstance(current, int):
        try:
            value = int(raw)
        except ValueError:
            raise ValidationError(f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}") from None
        if value <= 0:
            raise ValidationError(f"{ENV_PREFIX}{name.upper()} must be > 0")
        return value
    if isinstance(current, tuple):
        tokens = tuple(token.strip() for token in raw.split(",") if token.strip())
        if not tokens:
            raise ValidationError(f"{ENV_PREFIX}{name.upper()} must list at least one token")
        return tokens
    if name == "log_level":
        level = raw.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValidationError(f"{ENV_PREFIX}LOG_LEVEL must be a logging level name, got {raw!r}")
        return level
    return raw.strip()


def load_settings(environ=None):
    """Build settings from defaults plus any ``AUTOMATON_LAB_*`` overrides."""
    environ = os.environ if environ is None else environ
    settings = Settings()
    overrides = {}
    for field in fields(Settings):
        raw = environ.get(ENV_PREFIX + field.name.upper())
        if raw is None:
            continue
        overrides[field.name] = _coerce(field.name, raw, getattr(settings, field.name))

    if not overrides:
        return settings

    settings = replace(settings, **overrides)
    if settings.blank_text in settings.epsilon_texts:
        raise ValidationError("blank text and epsilon tokens must differ")
    return settings
