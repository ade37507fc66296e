"""Lexical analysis for lscript: converts raw source text into a list of tokens, tracking 1-based line and column.

Token grammar, tried in this order at every position:

```
<whitespace> ::= any whitespace character, newline included       ; skipped, never emitted
<number>     ::= [0-9]+                                           ; no sign, no fraction
<name>       ::= [A-Za-z_] [A-Za-z0-9_]*                          ; keyword if one of KEYWORDS
<string>     ::= '"' (<char> | "\" <char>)* '"'                   ; \n \t \r decoded, other escapes literal
<operator>   ::= "==" | "!=" | "<=" | ">=" | "&&" | "||"         ; two-character operators win greedily
               | "=" | "!" | "<" | ">" | "+" | "-" | "*" | "/"
<punct>      ::= "(" | ")" | "{" | "}" | ";" | ","
```

A lone '&' or '|' is an error, as is any other character. The list always ends with exactly one EOF token.
"""

import string
from dataclasses import dataclass
from enum import IntEnum, auto

from lscript.lang.config import Limits
from lscript.lang.error import LexError


class TokenKind(IntEnum):
    """All token kinds produced by the lexer."""
    EOF = auto()
    UNKNOWN = auto()
    NUMBER = auto()
    STRING = auto()
    IDENTIFIER = auto()

    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    ASSIGN = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    SEMI = auto()
    COMMA = auto()

    AND = auto()
    OR = auto()
    NOT = auto()

    IF = auto()
    ELSE = auto()
    LOOP = auto()
    OUTPUT = auto()
    INPUT = auto()


KEYWORDS = {
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "loop": TokenKind.LOOP,
    "output": TokenKind.OUTPUT,
    "input": TokenKind.INPUT,
}

# single characters that are complete tokens on their own
SINGLES = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ";": TokenKind.SEMI,
    ",": TokenKind.COMMA,
}

# first character: (kind alone, kind when followed by '=')
WITH_EQUALS = {
    "=": (TokenKind.ASSIGN, TokenKind.EQ),
    "!": (TokenKind.NOT, TokenKind.NE),
    "<": (TokenKind.LT, TokenKind.LE),
    ">": (TokenKind.GT, TokenKind.GE),
}

DOUBLED = {
    "&": TokenKind.AND,
    "|": TokenKind.OR,
}

ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}

DIGITS = set(string.digits)
NAME_START = set(string.ascii_letters + "_")
NAME_PART = NAME_START | DIGITS


@dataclass(frozen=True)
class Token:
    """A single token with the source position of its first character."""
    kind: TokenKind
    lexeme: str  # literal text; decoded contents for strings, empty for EOF
    line: int
    col: int

    def __repr__(self):
        return f"Token({self.kind.name}, {self.lexeme!r}, {self.line}:{self.col})"


class Lexer:
    """Single-use scanner over one source text."""

    def __init__(self, source, limits=None):
        self.source = source
        self.limits = limits if limits is not None else Limits()

        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens = []

    def peek(self, offset=0):
        """Character offset positions ahead, or '' past the end of source."""
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def advance(self):
        char = self.source[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return char

    def match(self, expected):
        """Consumes the current character if it is expected."""
        if self.peek() == expected:
            self.advance()
            return True
        return False

    def emit(self, kind, lexeme, line, col):
        if len(self.tokens) >= self.limits.max_tokens:
            raise LexError("token buffer overflow", line, col)
        self.tokens.append(Token(kind, lexeme, line, col))

    def tokenize(self):
        """Scans the whole source and returns the token list. Raises LexError on the first malformed token."""
        while self.pos < len(self.source):
            char = self.peek()
            if char.isspace():
                self.advance()
                continue

            line, col = self.line, self.col

            if char in DIGITS:
                self.emit(TokenKind.NUMBER, self._take_while(DIGITS), line, col)
            elif char in NAME_START:
                name = self._take_while(NAME_PART)
                self.emit(KEYWORDS.get(name, TokenKind.IDENTIFIER), name, line, col)
            elif char == '"':
                self.emit(TokenKind.STRING, self._string(line, col), line, col)
            else:
                self.emit(*self._operator(line, col), line, col)

        self.emit(TokenKind.EOF, "", self.line, self.col)
        return self.tokens

    def _take_while(self, chars):
        start = self.pos
        while self.peek() in chars:
            self.advance()
        return self.source[start:self.pos]

    def _string(self, line, col):
        """Reads a string literal starting at the opening quote and returns its decoded contents."""
        self.advance()  # opening quote

        chars = []
        while self.pos < len(self.source):
            char = self.advance()
            if char == '"':
                return "".join(chars)
            if char == "\\":
                if self.pos >= len(self.source):
                    break
                escaped = self.advance()
                chars.append(ESCAPES.get(escaped, escaped))
            else:
                chars.append(char)

        raise LexError("unterminated string", line, col)

    def _operator(self, line, col):
        """Reads an operator or punctuation token and returns (kind, lexeme)."""
        char = self.advance()

        if char in SINGLES:
            return SINGLES[char], char

        if char in WITH_EQUALS:
            alone, with_equals = WITH_EQUALS[char]
            if self.match("="):
                return with_equals, char + "="
            return alone, char

        if char in DOUBLED:
            if self.match(char):
                return DOUBLED[char], char * 2
            raise LexError(f"expected '{char * 2}', found lone '{char}'", line, col)

        raise LexError(f"unknown character '{char}'", line, col)


def tokenize(source, limits=None):
    """Convenience wrapper: tokens of source, raising LexError on failure."""
    return Lexer(source, limits).tokenize()
