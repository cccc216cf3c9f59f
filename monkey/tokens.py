"""Monkey tokenizer — lexes source into tokens on demand."""

from __future__ import annotations


# Token type constants
TK_ILLEGAL = "ILLEGAL"
TK_EOF = "EOF"

TK_IDENT = "IDENT"
TK_INT = "INT"
TK_STRING = "STRING"

TK_ASSIGN = "="
TK_PLUS = "+"
TK_MINUS = "-"
TK_BANG = "!"
TK_ASTERISK = "*"
TK_SLASH = "/"

TK_LT = "<"
TK_GT = ">"
TK_EQ = "=="
TK_NOT_EQ = "!="

TK_COMMA = ","
TK_SEMICOLON = ";"
TK_COLON = ":"

TK_LPAREN = "("
TK_RPAREN = ")"
TK_LBRACE = "{"
TK_RBRACE = "}"
TK_LBRACKET = "["
TK_RBRACKET = "]"

TK_FUNCTION = "FUNCTION"
TK_LET = "LET"
TK_TRUE = "TRUE"
TK_FALSE = "FALSE"
TK_IF = "IF"
TK_ELSE = "ELSE"
TK_RETURN = "RETURN"

KEYWORDS: dict[str, str] = {
    "fn": TK_FUNCTION,
    "let": TK_LET,
    "true": TK_TRUE,
    "false": TK_FALSE,
    "if": TK_IF,
    "else": TK_ELSE,
    "return": TK_RETURN,
}

# Two-character operators, matched before their one-character prefixes
DOUBLE_OPS: dict[str, str] = {
    "==": TK_EQ,
    "!=": TK_NOT_EQ,
}

SINGLE_OPS: dict[str, str] = {
    "=": TK_ASSIGN,
    "+": TK_PLUS,
    "-": TK_MINUS,
    "!": TK_BANG,
    "*": TK_ASTERISK,
    "/": TK_SLASH,
    "<": TK_LT,
    ">": TK_GT,
    ",": TK_COMMA,
    ";": TK_SEMICOLON,
    ":": TK_COLON,
    "(": TK_LPAREN,
    ")": TK_RPAREN,
    "{": TK_LBRACE,
    "}": TK_RBRACE,
    "[": TK_LBRACKET,
    "]": TK_RBRACKET,
}


def lookup_ident(word: str) -> str:
    """Keyword token type for `word`, or TK_IDENT."""
    return KEYWORDS.get(word, TK_IDENT)


class Token:
    """A token with type, literal source slice, and position."""

    def __init__(self, type_: str, literal: str, line: int = 1, col: int = 1):
        self.type: str = type_
        self.literal: str = literal
        self.line: int = line
        self.col: int = col

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.type == other.type and self.literal == other.literal

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.literal)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_letter(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


class Lexer:
    """Pull-based lexer: each `next_token()` call scans one token."""

    def __init__(self, source: str):
        self.source: str = source
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1

    def _peek_char(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx >= len(self.source):
            return ""
        return self.source[idx]

    def _advance(self) -> str:
        c = self.source[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return c

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] in " \t\r\n":
            self._advance()

    def next_token(self) -> Token:
        self._skip_whitespace()
        line = self.line
        col = self.col
        if self.pos >= len(self.source):
            return Token(TK_EOF, "", line, col)

        c = self._peek_char()
        start = self.pos

        two = c + self._peek_char(1)
        if two in DOUBLE_OPS:
            self._advance()
            self._advance()
            return Token(DOUBLE_OPS[two], two, line, col)

        if c in SINGLE_OPS:
            self._advance()
            return Token(SINGLE_OPS[c], c, line, col)

        # String literal: "..." with no escape processing
        if c == '"':
            self._advance()
            while self.pos < len(self.source) and self.source[self.pos] != '"':
                self._advance()
            if self.pos >= len(self.source):
                return Token(TK_ILLEGAL, self.source[start:], line, col)
            self._advance()  # closing "
            return Token(TK_STRING, self.source[start + 1 : self.pos - 1], line, col)

        if _is_letter(c):
            while self.pos < len(self.source) and _is_letter(self.source[self.pos]):
                self._advance()
            word = self.source[start : self.pos]
            return Token(lookup_ident(word), word, line, col)

        if _is_digit(c):
            while self.pos < len(self.source) and _is_digit(self.source[self.pos]):
                self._advance()
            return Token(TK_INT, self.source[start : self.pos], line, col)

        self._advance()
        return Token(TK_ILLEGAL, c, line, col)


def tokenize(source: str) -> list[Token]:
    """Tokenize Monkey source into a flat list ending with TK_EOF."""
    lexer = Lexer(source)
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == TK_EOF:
            return tokens
