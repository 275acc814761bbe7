"""Template parsing, substitution and classification primitives."""

from chatwright.core.arguments import parse_arguments
from chatwright.core.directives import DIRECTIVE_FAMILIES, scan_all_directives, scan_directives
from chatwright.core.placeholders import build_message, substitute
from chatwright.core.types import DirectiveOccurrence, Message

__all__ = [
    "DIRECTIVE_FAMILIES",
    "DirectiveOccurrence",
    "Message",
    "build_message",
    "parse_arguments",
    "scan_all_directives",
    "scan_directives",
    "substitute",
]
