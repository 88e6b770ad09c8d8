"""Pygments lexer for the Sculp language."""

import re

from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class SculpLexer(RegexLexer):
    """Pygments lexer for the Sculp language."""

    name = "Sculp"
    aliases = ["sculp"]
    filenames = ["*.sculp"]
    mimetypes = ["text/x-sculp"]
    flags = re.IGNORECASE | re.MULTILINE

    tokens = {
        "root": [
            (r"\s+", Text),
            (r'"', String, "string"),
            (r"[0-9]+", Number.Integer),
            # Definitions: def name as ...
            (
                r"(def)(\s+)([\w-]+)",
                bygroups(Keyword.Declaration, Text, Name.Function),
            ),
            # Template placeholders
            (r"(\$)([\w-]+)", bygroups(Operator, Name.Variable)),
            # Space paths: @ a.b
            (r"@", Name.Decorator),
            (
                words(
                    ("enter", "exit", "as"),
                    prefix=r"\b",
                    suffix=r"(?![\w-])",
                ),
                Keyword.Namespace,
            ),
            (
                words(
                    (
                        "skip",
                        "next",
                        "if",
                        "then",
                        "unless",
                        "while",
                        "when",
                        "whenever",
                        "do",
                        "until",
                        "repeat",
                    ),
                    prefix=r"\b",
                    suffix=r"(?![\w-])",
                ),
                Keyword,
            ),
            (r"\bv(?![\w-])", Operator.Word),
            # Match-list fields
            (r"([\w-]+)(\s*)(:)", bygroups(Name.Attribute, Text, Punctuation)),
            # Procedure calls
            (r"([\w-]+)(?=\s*\()", Name.Function),
            (r"\|\||[*.&]", Operator),
            (r"[(){},:]", Punctuation),
            (r"[\w-]+", Name),
            (r".", Text),
        ],
        "string": [
            (r'\\.', String.Escape),
            (r'[^"\\]+', String),
            (r'"', String, "#pop"),
        ],
    }
