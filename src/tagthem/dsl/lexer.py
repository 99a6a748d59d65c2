"""Lexer/tokenizer for the tagthem rule DSL.

Converts expression strings into a stream of tokens for the parser.

Token types:
- Literals: TAG, FIELD_PATH (both come from one double-quoted literal,
  ``"tag"`` or ``"tag:field.path"``)
- Operators: AND, OR, NOT
- Punctuation: LPAREN, RPAREN
- WHITESPACE, EOF
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenType(Enum):
    """Types of tokens in the rule language."""

    # Literals
    TAG = auto()
    FIELD_PATH = auto()

    # Logical operators
    AND = auto()         # and
    OR = auto()          # or
    NOT = auto()         # not

    # Punctuation
    LPAREN = auto()      # (
    RPAREN = auto()      # )

    WHITESPACE = auto()

    # End of input
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the lexer.

    Attributes:
        type: The token type
        value: The literal text (tag name, field path, keyword as written)
        position: Character position in the source string
    """

    type: TokenType
    value: str
    position: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


class LexerError(Exception):
    """Error during lexical analysis."""

    def __init__(self, message: str, fragment: str, position: int):
        self.message = message
        self.fragment = fragment
        self.position = position
        super().__init__(f"{message}: {fragment!r} at position {position}")


KEYWORDS = {
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
}

_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class Lexer:
    """Tokenizer for the rule DSL.

    Tokens are produced lazily, one per ``next_token`` call. A quoted literal
    with a field path produces two tokens (TAG then FIELD_PATH); the second
    one is held back until the following call.

    Usage:
        lexer = Lexer('"tagA" and not ("tagB" or "tagC:sub.field")')
        for token in lexer:
            print(token)
    """

    def __init__(self, source: str, case_sensitive: bool = False):
        self.source = source
        self.case_sensitive = case_sensitive
        self.position = 0
        self._pending: Token | None = None

    def __iter__(self) -> Iterator[Token]:
        """Iterate over all tokens in the source, EOF included."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def next_token(self) -> Token:
        """Get the next token from the source."""
        if self._pending is not None:
            token, self._pending = self._pending, None
            return token

        if self.position >= len(self.source):
            return Token(TokenType.EOF, "", len(self.source))

        start = self.position
        char = self.source[start]

        match = _WHITESPACE.match(self.source, start)
        if match:
            self.position = match.end()
            return Token(TokenType.WHITESPACE, match.group(), start)

        if char == "(":
            self.position += 1
            return Token(TokenType.LPAREN, char, start)

        if char == ")":
            self.position += 1
            return Token(TokenType.RPAREN, char, start)

        if char == '"':
            return self._scan_literal()

        match = _WORD.match(self.source, start)
        if match:
            word = match.group()
            key = word if self.case_sensitive else word.lower()
            if key not in KEYWORDS:
                raise LexerError("Unexpected word (tags must be quoted)", word, start)
            self.position = match.end()
            return Token(KEYWORDS[key], word, start)

        raise LexerError("Unexpected character", char, start)

    def _scan_literal(self) -> Token:
        """Scan a double-quoted tag literal starting at the current position."""
        start = self.position
        name_chars: list[str] = []
        path_chars: list[str] = []
        chars = name_chars
        path_start: int | None = None
        i = start + 1
        while i < len(self.source):
            char = self.source[i]
            if char == "\\" and i + 1 < len(self.source):
                chars.append(self.source[i + 1])
                i += 2
                continue
            if char == '"':
                break
            if char == ":" and path_start is None:
                # First unescaped ':' separates the tag from its field path
                path_start = i + 1
                chars = path_chars
            else:
                chars.append(char)
            i += 1
        else:
            raise LexerError("Unterminated tag literal", self.source[start:], start)

        self.position = i + 1
        fragment = self.source[start:self.position]
        name = "".join(name_chars)

        if not name:
            raise LexerError("Empty tag name", fragment, start)

        if path_start is not None:
            field_path = "".join(path_chars)
            if not field_path or "" in field_path.split("."):
                raise LexerError("Invalid field path", fragment, start)
            self._pending = Token(TokenType.FIELD_PATH, field_path, path_start)

        return Token(TokenType.TAG, name, start)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        return list(self)
