"""
Expression trees for plusrw.

An expression is one of two node shapes:

    Leaf("x")                      - an identifier
    Binary("+", left, right)       - an operator applied to two children

Nodes are treated as immutable. Rewrites always build new nodes and
share untouched children, so a subtree may appear in several trees.
"""

from typing import List, Tuple, Union

ADD = "+"


class Leaf:
    """An identifier with no children."""

    __slots__ = ('name',)

    def __init__(self, name: str):
        self.name = name

    def __eq__(self, other):
        if isinstance(other, Leaf):
            return self.name == other.name
        return False

    def __hash__(self) -> int:
        return hash(("leaf", self.name))

    def __repr__(self) -> str:
        return f"Leaf({self.name!r})"


class Binary:
    """
    An operator node with a left and a right child.

    Only "+" is produced by the parser, but any operator tag can be
    stored and rendered.
    """

    __slots__ = ('op', 'left', 'right')

    def __init__(self, op: str, left: 'Expression', right: 'Expression'):
        self.op = op
        self.left = left
        self.right = right

    def __eq__(self, other):
        if isinstance(other, Binary):
            return (self.op == other.op
                    and self.left == other.left
                    and self.right == other.right)
        return False

    def __hash__(self) -> int:
        return hash((self.op, self.left, self.right))

    def __repr__(self) -> str:
        return f"Binary({self.op!r}, {self.left!r}, {self.right!r})"


Expression = Union[Leaf, Binary]


def is_leaf(expr: Expression) -> bool:
    """Check if an expression is a leaf identifier."""
    return isinstance(expr, Leaf)


def is_binary(expr: Expression, op: str = ADD) -> bool:
    """Check if an expression is a binary node with the given operator."""
    return isinstance(expr, Binary) and expr.op == op


def leaves(expr: Expression) -> List[str]:
    """
    Collect leaf identifiers from left to right.

    Examples:
        leaves(E("((x + y) + z)")) -> ["x", "y", "z"]
        leaves(E("x")) -> ["x"]
    """
    if isinstance(expr, Leaf):
        return [expr.name]
    if isinstance(expr, Binary):
        return leaves(expr.left) + leaves(expr.right)
    raise TypeError(f"Not an expression: {expr!r}")


def equivalent(a: Expression, b: Expression) -> bool:
    """
    Check if two sums are equal under associativity and commutativity.

    Two pure sums are equal exactly when they add up the same multiset of
    identifiers, so grouping and order are ignored.
    """
    return sorted(leaves(a)) == sorted(leaves(b))


# ============================================================
# Expression Builder
# ============================================================

class _ExprBuilder:
    """
    Expression builder for plusrw.

    Examples:
        from plusrw import E

        # Parse a text expression
        expr = E("((x + y) + z)")

        # Build programmatically
        expr = E.add(E.add("x", "y"), "z")

        # Create leaves for unpacking
        x, y, z = E.vars("x", "y", "z")
        expr = E.add(x, E.add(y, z))
    """

    def __call__(self, s: str) -> Expression:
        """
        Parse a text expression.

        Examples:
            E("x + y") -> Binary("+", Leaf("x"), Leaf("y"))
            E("x") -> Leaf("x")
        """
        from .parser import parse
        return parse(s)

    def leaf(self, name: str) -> Leaf:
        return Leaf(name)

    def add(self, left: Union[Expression, str], right: Union[Expression, str]) -> Binary:
        """Build a "+" node. Plain strings become leaves."""
        return Binary(ADD, _coerce(left), _coerce(right))

    def sum(self, *terms: Union[Expression, str]) -> Expression:
        """
        Build a sum of several terms.

        The terms are grouped the way the parser groups an unparenthesized
        chain, so E.sum("a", "b", "c") == E("a+b+c") == (a + (b + c)).
        """
        if not terms:
            raise ValueError("sum: at least one term is required")
        result = _coerce(terms[-1])
        for term in reversed(terms[:-1]):
            result = Binary(ADD, _coerce(term), result)
        return result

    def vars(self, *names: str) -> Tuple[Leaf, ...]:
        """
        Create several leaves for unpacking.

        Example:
            x, y = E.vars("x", "y")
        """
        return tuple(Leaf(name) for name in names)

    def __repr__(self) -> str:
        return "E (expression builder)"


def _coerce(value: Union[Expression, str]) -> Expression:
    if isinstance(value, (Leaf, Binary)):
        return value
    if isinstance(value, str):
        return Leaf(value)
    raise TypeError(f"Cannot build an expression from {value!r}")


# Singleton instance
E = _ExprBuilder()
