"""
plusrw - rewriting sums with associativity, commutativity and parentheses

Parses addition expressions into binary trees, applies one named rewrite
rule at a time, and renders the result back to text.

Quick Start:
    from plusrw import apply_rule, Session

    apply_rule("associativity", "((x + y) + z)")   # => "(x + (y + z))"
    apply_rule("commutativity", "(x + (y + z))")   # => "((y + z) + x)"

    session = Session("((x + y) + z)")
    session.apply("associativity")
    session.history.to_list()   # => ["((x + y) + z)", "(x + (y + z))"]

Rules (display order):
    associativity        (x + y) + z <-> x + (y + z)
    commutativity        x + y <-> y + x
    parenthesis-removal  x + (y + z) -> x + y + z

A rule that does not match returns its input unchanged.
"""

__version__ = "0.1.0"

# Expression trees
from .expr import (
    ADD,
    Leaf,
    Binary,
    Expression,
    E,
    is_leaf,
    is_binary,
    leaves,
    equivalent,
)

# Text conversion
from .parser import (
    normalize,
    parse,
    render,
    is_wrapped,
    strip_innermost_groups,
)

# Rules
from .rules import (
    Rule,
    RULES,
    RULE_ALIASES,
    associate,
    commute,
    apply_rule,
    list_rules,
    get_rule,
)

# Engine and sessions
from .engine import RewriteEngine, RewriteStep
from .session import Session, History, validate_expression, DEFAULT_EXPRESSION

# Public API
__all__ = [
    # Version
    "__version__",
    # Expressions
    "ADD",
    "Leaf",
    "Binary",
    "Expression",
    "E",
    "is_leaf",
    "is_binary",
    "leaves",
    "equivalent",
    # Text
    "normalize",
    "parse",
    "render",
    "is_wrapped",
    "strip_innermost_groups",
    # Rules
    "Rule",
    "RULES",
    "RULE_ALIASES",
    "associate",
    "commute",
    "apply_rule",
    "list_rules",
    "get_rule",
    # Engine
    "RewriteEngine",
    "RewriteStep",
    # Sessions
    "Session",
    "History",
    "validate_expression",
    "DEFAULT_EXPRESSION",
]
