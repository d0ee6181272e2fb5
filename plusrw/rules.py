"""
The built-in rewrite rules.

Every rule is a pure function from expression text to expression text.
A rule parses its input, rewrites the root of the tree and renders the
result. When the rule's pattern does not match, the input text is returned
unchanged; callers detect this "no-op" by string equality.

Rules, in display order:
    associativity        (x + y) + z <-> x + (y + z)
    commutativity        x + y <-> y + x
    parenthesis-removal  x + (y + z) -> x + y + z
"""

from typing import Callable, Dict, List, Optional, Tuple

from .expr import ADD, Binary, Expression, is_binary
from .parser import parse, render, strip_innermost_groups

RewriteFunc = Callable[[str], str]


class Rule:
    """A named, described rewrite rule."""

    __slots__ = ('name', 'description', 'func')

    def __init__(self, name: str, description: str, func: RewriteFunc):
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'description', description)
        object.__setattr__(self, 'func', func)

    def __setattr__(self, key, value):
        raise AttributeError(f"Rule '{self.name}' is immutable")

    def apply(self, expr: str) -> str:
        """Apply the rule, returning the input unchanged if it does not match."""
        return self.func(expr)

    def __call__(self, expr: str) -> str:
        return self.func(expr)

    def matches(self, expr: str) -> bool:
        """True if applying the rule would change the expression."""
        return self.func(expr) != expr

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "description": self.description}

    def __eq__(self, other):
        if isinstance(other, Rule):
            return (self.name, self.description, self.func) == \
                   (other.name, other.description, other.func)
        return False

    def __hash__(self) -> int:
        return hash((self.name, self.description, self.func))

    def __repr__(self) -> str:
        return f"@{self.name} \"{self.description}\""


# ============================================================
# Tree Rewrites
# ============================================================

def associate(expr: Expression) -> Optional[Expression]:
    """
    Regroup a sum at the root.

    (x + y) + z => x + (y + z) is tried first; only if the left child is
    not a sum is x + (y + z) => (x + y) + z tried.

    Returns None if neither shape matches.
    """
    if not is_binary(expr):
        return None
    if is_binary(expr.left):
        x, y, z = expr.left.left, expr.left.right, expr.right
        return Binary(ADD, x, Binary(ADD, y, z))
    if is_binary(expr.right):
        x, y, z = expr.left, expr.right.left, expr.right.right
        return Binary(ADD, Binary(ADD, x, y), z)
    return None


def commute(expr: Expression) -> Optional[Expression]:
    """Swap the operands of the root sum, or None for a leaf."""
    if not is_binary(expr):
        return None
    return Binary(ADD, expr.right, expr.left)


# ============================================================
# Text Rules
# ============================================================

def associativity(expr: str) -> str:
    rewritten = associate(parse(expr))
    return expr if rewritten is None else render(rewritten)


def commutativity(expr: str) -> str:
    rewritten = commute(parse(expr))
    return expr if rewritten is None else render(rewritten)


def parenthesis_removal(expr: str) -> str:
    """
    Render the expression and unwrap its innermost groups once.

    The result is not canonical: "(x + (y + z))" becomes "(x + y + z)".
    Input that is not in canonical spacing may change even when no group
    is unwrapped, since the text is re-rendered first.
    """
    return strip_innermost_groups(render(parse(expr)))


RULES: Tuple[Rule, ...] = (
    Rule("associativity", "(x + y) + z ↔ x + (y + z)", associativity),
    Rule("commutativity", "x + y ↔ y + x", commutativity),
    Rule("parenthesis-removal",
         "Remove redundant parentheses, e.g. x + (y + z) → x + y + z",
         parenthesis_removal),
)

# Short names accepted wherever a rule name is looked up
RULE_ALIASES: Dict[str, str] = {
    "assoc": "associativity",
    "associative": "associativity",
    "comm": "commutativity",
    "commute": "commutativity",
    "commutative": "commutativity",
    "parens": "parenthesis-removal",
    "paren-removal": "parenthesis-removal",
    "remove-parentheses": "parenthesis-removal",
}


def canonical_name(name: str) -> str:
    """
    Map a user-supplied rule name to its canonical form.

    Examples:
        canonical_name("Associativity") -> "associativity"
        canonical_name("parenthesis_removal") -> "parenthesis-removal"
        canonical_name("parens") -> "parenthesis-removal"
    """
    key = '-'.join(name.strip().lower().replace('_', ' ').split())
    return RULE_ALIASES.get(key, key)


def get_rule(name: str) -> Optional[Rule]:
    """Look up a built-in rule by name or alias."""
    key = canonical_name(name)
    for rule in RULES:
        if rule.name == key:
            return rule
    return None


def list_rules() -> List[Dict[str, str]]:
    """Return [{"name", "description"}] for every rule, in display order."""
    return [rule.to_dict() for rule in RULES]


def apply_rule(rule_name: str, expr: str) -> str:
    """
    Apply a built-in rule by name.

    Returns the input unchanged when the rule's pattern does not match.

    Raises:
        KeyError: If no rule has that name
    """
    rule = get_rule(rule_name)
    if rule is None:
        raise KeyError(f"No rule named '{rule_name}'")
    return rule.apply(expr)
