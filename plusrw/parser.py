"""
Text <-> expression conversion for plusrw.

Text syntax:
    x               - identifier
    a + b           - sum
    (a + b) + c     - grouping

Whitespace is insignificant. The canonical rendering wraps every sum in
parentheses with single spaces around the operator:

    render(parse("x+(y+z)")) -> "(x + (y + z))"

Parsing never fails: text that cannot be split degrades to a single leaf,
and so does whatever remains once MAX_PARSE_DEPTH nested sums have been
split off.
"""

import re

from .expr import ADD, Binary, Expression, Leaf

_WHITESPACE = re.compile(r'\s+')
_INNERMOST_GROUP = re.compile(r'\(([^()]+)\)')

# Deepest chain of nested sums parse() will build
MAX_PARSE_DEPTH = 256


def normalize(text: str) -> str:
    """
    Remove every whitespace character.

    Examples:
        normalize("(x + y)") -> "(x+y)"
        normalize(" a\t+\nb ") -> "a+b"
    """
    return _WHITESPACE.sub('', text)


def is_wrapped(text: str) -> bool:
    """
    Check if one matching pair of parentheses spans the whole text.

    Examples:
        is_wrapped("(a+b)") -> True
        is_wrapped("((a+b)+c)") -> True
        is_wrapped("(a+b)+(c+d)") -> False
    """
    if not (text.startswith('(') and text.endswith(')')):
        return False

    depth = 0
    for i, c in enumerate(text):
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
            if depth == 0:
                # The opening paren must close on the last character
                return i == len(text) - 1
    return False


def parse(text: str) -> Expression:
    """
    Parse a text expression into a tree.

    Only one layer of enclosing parentheses is stripped per call, and the
    first "+" found at nesting depth 0 splits the text. An unparenthesized
    chain therefore groups to the right:

        parse("a+b+c") -> Binary("+", Leaf("a"), Binary("+", Leaf("b"), Leaf("c")))

    Text without a top-level "+" becomes a Leaf holding that text. Below
    MAX_PARSE_DEPTH levels of nesting the remaining text is kept whole as a
    Leaf too, so very long sums never exhaust the interpreter stack.
    """
    return _parse(normalize(text), 0)


def _parse(text: str, level: int) -> Expression:
    if ADD not in text or level >= MAX_PARSE_DEPTH:
        return Leaf(text)

    if is_wrapped(text):
        text = text[1:-1]

    depth = 0
    for i, c in enumerate(text):
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
        elif c == ADD and depth == 0:
            return Binary(ADD, _parse(text[:i], level + 1), _parse(text[i + 1:], level + 1))

    # No top-level operator, keep the text whole
    return Leaf(text)


def render(expr: Expression) -> str:
    """
    Render an expression in canonical, fully parenthesized form.

    Examples:
        Leaf("x") -> "x"
        Binary("+", Leaf("x"), Leaf("y")) -> "(x + y)"
    """
    if isinstance(expr, Leaf):
        return expr.name
    if isinstance(expr, Binary):
        return f"({render(expr.left)} {expr.op} {render(expr.right)})"
    raise TypeError(f"Cannot render {expr!r}: expected Leaf or Binary")


def strip_innermost_groups(text: str) -> str:
    """
    Unwrap every parenthesized group that contains no nested parentheses.

    This is a single pass: groups uncovered by the substitution are left
    alone until the next call.

    Examples:
        strip_innermost_groups("(x + (y + z))") -> "(x + y + z)"
        strip_innermost_groups("((a + b) + (c + d))") -> "(a + b + c + d)"
    """
    return _INNERMOST_GROUP.sub(r'\1', text)


def count_parens(text: str) -> int:
    """
    Count unbalanced parentheses.

    Returns >0 if more open than close, <0 if a closing paren appears
    before its opening one or closers outnumber openers.
    """
    depth = 0
    for c in text:
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
            if depth < 0:
                return depth
    return depth
