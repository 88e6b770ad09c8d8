"""Sculp: lexer, Pratt parser and AST for a reactive, space-scoped process language."""

from sculp.ast_nodes import STOP, Expression
from sculp.errors import SculpError, SculpReferenceError, SculpSyntaxError, SculpTypeError
from sculp.parser import parse
from sculp.signatures import DEFAULT_SIGNATURES, SignatureTable

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_SIGNATURES",
    "STOP",
    "Expression",
    "SculpError",
    "SculpReferenceError",
    "SculpSyntaxError",
    "SculpTypeError",
    "SignatureTable",
    "__version__",
    "parse",
]
