"""Tests for Pygments lexers and styles."""

from __future__ import annotations

from pygments.token import Generic, Keyword, Name

from termpix.pygments import ArgparseLexer


def test_argparse_lexer() -> None:
    """Argparse help text is tokenized."""
    code = """usage: termpix [-h] [--width int] [files ...]

options:
  -h, --help  show this help message and exit
  --width int   Width of the printed image in terminal columns
"""
    tokens = [
        (token, value)
        for token, value in ArgparseLexer().get_tokens(code)
        if value.strip()
    ]
    assert (Name.Namespace, "termpix") in tokens
    assert (Keyword, "--width") in tokens
    assert (Keyword, "-h") in tokens
    assert (Name.Builtin, "int") in tokens
    assert (Generic.Heading, "options:") in tokens
