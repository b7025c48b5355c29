"""Contain lexers and styles for pygments."""

from __future__ import annotations

from typing import ClassVar

from pygments.lexer import RegexLexer
from pygments.style import Style
from pygments.token import (
    Comment,
    Error,
    Generic,
    Keyword,
    Literal,
    Name,
    Operator,
    Text,
    _TokenType,
)


class ArgparseLexer(RegexLexer):
    """A pygments lexer for argparse help text."""

    name = "argparse"
    aliases: ClassVar[list[str]] = ["argparse"]
    filenames: ClassVar[list[str]] = []

    tokens: ClassVar[
        dict[str, list[tuple[str, _TokenType] | tuple[str, _TokenType, str]]]
    ] = {
        "root": [
            (r"(?<=usage: )[^\s]+", Name.Namespace),
            (r"\{", Operator, "choices"),
            (r"[\[\{\|\}\]]", Operator),
            (r"((?<=\s)|(?<=\[))(--[a-zA-Z0-9-]+|-[a-zA-Z0-9-])", Keyword),
            (r"^(\w+\s)?\w+:", Generic.Heading),
            (r"\b(str|int|float|bool|UPath|loads)\b", Name.Builtin),
            (r"\b[A-Z]+_[A-Z]*\b", Name.Variable),
            (r"'.*?'", Literal.String),
            (r"©.*$", Comment),
            (r".", Text),
        ],
        "choices": [
            (r"\d+", Literal.Number),
            (r",", Text),
            (r"[^\}]", Literal.String),
            (r"\}", Operator, "#pop"),
        ],
    }


class TermpixPygmentsStyle(Style):
    """A variant of pygments' "native" style which is readable on light backgrounds."""

    styles: ClassVar[dict[_TokenType, str]] = {
        Comment: "italic #888888",
        Keyword: "bold #6ebf26",
        Operator: "#aaaaaa",
        Literal.Date: "#2fbccd",
        Literal.String: "#ed9d13",
        Literal.Number: "#51b2fd",
        Name.Builtin: "#2fbccd",
        Name.Variable: "#40ffff",
        Name.Namespace: "underline #71adff",
        Name.Exception: "noinherit bold",
        Generic.Heading: "bold",
        Generic.Traceback: "#d22323",
        Generic.Error: "#d22323",
        Error: "bg:#e3d2d2 #a61717",
    }
