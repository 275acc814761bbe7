"""chatwright - directive-driven prompt templating and function dispatch."""

from chatwright.contracts import ChatTurnInput, ChatTurnOutput, validate_init_input, validate_turn_input
from chatwright.core import build_message, parse_arguments, scan_directives, substitute
from chatwright.core.orchestrator import ResponseOrchestrator
from chatwright.functions import FunctionDefinition, FunctionRegistry, build_default_registry

__version__ = "0.1.0"

__all__ = [
    "ChatTurnInput",
    "ChatTurnOutput",
    "FunctionDefinition",
    "FunctionRegistry",
    "ResponseOrchestrator",
    "build_default_registry",
    "build_message",
    "parse_arguments",
    "scan_directives",
    "substitute",
    "validate_init_input",
    "validate_turn_input",
]
