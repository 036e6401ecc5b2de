"""
A hand-written recursive-descent parser for dentaku lines.

There is no separate tokenizer: each production pulls characters from the
line buffer on demand and returns the index of the first unconsumed
character, so the caller can see what was left over.

    stmt   := expr | symbol '=' expr
    expr   := ['+'|'-'] term (('+'|'-') term)*
    term   := factor (('*'|'/') factor)*
    factor := number | symbol | '(' expr ')' | symbol '(' expr ')'
"""
from typing import Tuple

from dentaku.dentaku_datatypes import (
    Expression, Number, Symbol, UnaryOp, BinaryOp, Assignment, FunctionCall
)

SOURCE_NAME = "<line>"


# -----------------------------------------------------------------
# Scanner primitives
# -----------------------------------------------------------------

def is_digit(ch: str) -> bool:
    return len(ch) == 1 and '0' <= ch <= '9'


def is_alpha(ch: str) -> bool:
    """ASCII letters and underscore."""
    return len(ch) == 1 and ('a' <= ch <= 'z' or 'A' <= ch <= 'Z' or ch == '_')


def is_space(ch: str) -> bool:
    return ch == ' ' or ch == '\t'


def digit_value(ch: str) -> int:
    """Value of a hex-capable digit character, or -1."""
    if is_digit(ch):
        return ord(ch) - ord('0')
    if len(ch) == 1 and 'a' <= ch <= 'f':
        return ord(ch) - ord('a') + 10
    if len(ch) == 1 and 'A' <= ch <= 'F':
        return ord(ch) - ord('A') + 10
    return -1


def _peek(buf: str, pos: int) -> str:
    # '' at end of buffer keeps the productions free of bounds checks
    return buf[pos] if pos < len(buf) else ''


def _syntax_error(message: str, buf: str, pos: int) -> SyntaxError:
    return SyntaxError(message, (SOURCE_NAME, 1, pos + 1, buf))


def skip_space(buf: str, pos: int) -> int:
    """Advances past spaces and tabs; may return len(buf)."""
    while pos < len(buf) and is_space(buf[pos]):
        pos += 1
    return pos


def scan_number(buf: str, pos: int) -> Tuple[Number, int]:
    """Scans an integer literal in base 2 (0b), 8 (0NNN), 10 or 16 (0x)."""
    ch = _peek(buf, pos)
    if not is_digit(ch):
        raise _syntax_error(f"not number: {buf[pos:]}", buf, pos)
    n = digit_value(ch)
    pos += 1
    base = 10
    if n == 0:
        nxt = _peek(buf, pos)
        if nxt in ('b', 'B'):
            base = 2
            pos += 1
        elif nxt in ('x', 'X'):
            base = 16
            pos += 1
        elif is_digit(nxt):
            base = 8
    while pos < len(buf):
        d = digit_value(buf[pos])
        if d < 0 or d >= base:
            break
        n = n * base + d
        pos += 1
    return Number(n), pos


def scan_symbol(buf: str, pos: int) -> Tuple[Symbol, int]:
    """Scans an identifier. A leading '.' marks a configuration variable."""
    ch = _peek(buf, pos)
    if not is_alpha(ch) and ch != '.':
        raise _syntax_error(f"not symbol: {buf[pos:]}", buf, pos)
    end = pos + 1
    while end < len(buf) and (is_alpha(buf[end]) or is_digit(buf[end])):
        end += 1
    return Symbol(buf[pos:end]), end


# -----------------------------------------------------------------
# Parser
# -----------------------------------------------------------------

class Parser:
    """Parses one line into an expression tree."""

    def __init__(self, line: str):
        self.buf = line

    def parse_statement(self, pos: int = 0) -> Tuple[Expression, int]:
        buf = self.buf
        pos = skip_space(buf, pos)
        stmt, pos = self.parse_expression(pos)
        pos = skip_space(buf, pos)
        if _peek(buf, pos) == '=':
            # The target is only checked once the left side is fully parsed.
            if not isinstance(stmt, Symbol):
                raise _syntax_error(f"lvalue is not symbol: {stmt}", buf, pos)
            value, pos = self.parse_expression(pos + 1)
            stmt = Assignment(stmt, value)
        return stmt, pos

    def parse_expression(self, pos: int) -> Tuple[Expression, int]:
        buf = self.buf
        pos = skip_space(buf, pos)
        sign = _peek(buf, pos)
        if sign in ('+', '-'):
            pos += 1
        expr, pos = self.parse_term(pos)
        if sign == '-':
            expr = UnaryOp('-', expr)
        pos = skip_space(buf, pos)
        while _peek(buf, pos) in ('+', '-'):
            op = buf[pos]
            right, pos = self.parse_term(pos + 1)
            expr = BinaryOp(op, expr, right)
            pos = skip_space(buf, pos)
        return expr, pos

    def parse_term(self, pos: int) -> Tuple[Expression, int]:
        buf = self.buf
        pos = skip_space(buf, pos)
        term, pos = self.parse_factor(pos)
        pos = skip_space(buf, pos)
        while _peek(buf, pos) in ('*', '/'):
            op = buf[pos]
            right, pos = self.parse_factor(pos + 1)
            term = BinaryOp(op, term, right)
            pos = skip_space(buf, pos)
        return term, pos

    def parse_factor(self, pos: int) -> Tuple[Expression, int]:
        buf = self.buf
        start = pos = skip_space(buf, pos)
        ch = _peek(buf, pos)
        if ch == '(':
            factor, pos = self.parse_expression(pos + 1)
            pos = skip_space(buf, pos)
            if _peek(buf, pos) != ')':
                raise _syntax_error("unbalanced paren", buf, start)
            return factor, pos + 1
        if is_digit(ch):
            return scan_number(buf, pos)
        if is_alpha(ch) or ch == '.':
            sym, pos = scan_symbol(buf, pos)
            after = skip_space(buf, pos)
            if _peek(buf, after) == '(':
                arg, pos = self.parse_expression(after + 1)
                pos = skip_space(buf, pos)
                if _peek(buf, pos) != ')':
                    raise _syntax_error(f"unbalanced paren for func: {sym.name}", buf, start)
                return FunctionCall(sym, arg), pos + 1
            return sym, pos
        if not ch:
            raise _syntax_error("unexpected end of line", buf, pos)
        raise _syntax_error(f"unexpected token: {buf[pos:].rstrip()}", buf, pos)


def read(line: str) -> Tuple[Expression, str]:
    """Parses one statement, returning it with the unconsumed rest of the line."""
    stmt, pos = Parser(line).parse_statement()
    return stmt, line[pos:]
