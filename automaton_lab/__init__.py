"""Simulators for Turing machines, finite automata and pushdown automata."""
from .errors import ValidationError
from .finite import DFA, NFA
from .pushdown import PDA, SearchOutcome
from .symbols import BLANK, EPSILON, Action, Move
from .turing import MultiTapeTuringMachine, StepStatus, TuringMachineDefinition

__version__ = "0.1.0"
