"""
Rewriting sessions: the current expression and its history.

A Session is the caller-side state the engine itself never keeps. It holds
the current expression text and an append-only History of every
expression produced, starting with the seed:

    session = Session("((x + y) + z)")
    session.apply("associativity")      # True, history grows
    session.apply("parenthesis-removal")
    session.history.to_list()
    # => ["((x + y) + z)", "(x + (y + z))", "(x + y + z)"]

A rule that does not apply leaves the session untouched and returns False.
"""

import json
import logging
import re
from typing import Dict, Iterable, Iterator, List, Optional

from .engine import DEFAULT_MAX_STEPS, RewriteEngine, RewriteStep
from .expr import ADD, leaves
from .parser import MAX_PARSE_DEPTH, count_parens, normalize, parse

log = logging.getLogger(__name__)

DEFAULT_EXPRESSION = "((x + y) + z)"

_ALLOWED = re.compile(r'^[\w\s+()]*$')
_MISSING_OPERAND = re.compile(r'^\+|\+$|\+\+|\(\+|\+\)|\(\)')
_IDENTIFIER = re.compile(r'^\w+$')


def validate_expression(text: str) -> str:
    """
    Check user-supplied text before it reaches the engine.

    Accepts identifier characters, "+", parentheses and whitespace, with
    balanced parentheses, at least one identifier and an operand on each
    side of every "+". Every group must hold a sum, and the sum may have at
    most MAX_PARSE_DEPTH operators so that it parses in full.

    Returns:
        The text unchanged

    Raises:
        ValueError: If the text is empty or malformed
    """
    if not text or not text.strip():
        raise ValueError("Expression is empty")
    if not _ALLOWED.match(text):
        bad = sorted(set(re.sub(r'[\w\s+()]', '', text)))
        raise ValueError(f"Invalid character(s) in expression: {''.join(bad)}")
    depth = count_parens(text)
    if depth > 0:
        raise ValueError("Unbalanced parentheses (too many opening)")
    if depth < 0:
        raise ValueError("Unbalanced parentheses (too many closing)")
    if not re.search(r'\w', text):
        raise ValueError("Expression has no identifiers")
    if _MISSING_OPERAND.search(normalize(text)):
        raise ValueError("Missing operand around '+' or empty parentheses")
    if text.count(ADD) > MAX_PARSE_DEPTH:
        raise ValueError(f"Expression has more than {MAX_PARSE_DEPTH} '+' operators")
    for name in leaves(parse(text)):
        if not _IDENTIFIER.match(name):
            raise ValueError(f"Parentheses must enclose a sum: {name}")
    return text


class History:
    """
    Ordered, append-only log of expression text.

    The first entry is the seed expression. Entries are never removed or
    reordered.
    """

    def __init__(self, seed: str):
        self._entries: List[str] = [seed]

    def append(self, expr: str) -> None:
        self._entries.append(expr)

    @property
    def seed(self) -> str:
        return self._entries[0]

    @property
    def last(self) -> str:
        return self._entries[-1]

    def to_list(self) -> List[str]:
        """Return a copy of the entries."""
        return list(self._entries)

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"History({self._entries!r})"


class Session:
    """
    A sequence of rule applications starting from a seed expression.

    Provides multiple formatting options:
        - format("verbose"): full multi-line format with before/after
        - format("compact"): single line showing rule chain
        - format("rules"): just the rule names applied
        - format("chain"): expressions joined by the rules between them
        - to_dict() / to_json(): JSON-serializable record
    """

    FORMAT_STYLES = ("verbose", "compact", "rules", "chain")

    def __init__(self, expression: str = DEFAULT_EXPRESSION,
                 engine: Optional[RewriteEngine] = None,
                 validate: bool = True):
        """
        Start a session.

        Args:
            expression: Seed expression text
            engine: Engine to apply rules with. Default: built-in rules.
            validate: If True (default), reject malformed seed text with
                ValueError instead of letting it degrade to a leaf.
        """
        if validate:
            validate_expression(expression)
        self.engine = engine if engine is not None else RewriteEngine()
        self.validate = validate
        self.history = History(expression)
        self.steps: List[RewriteStep] = []

    @property
    def current(self) -> str:
        """The current expression text."""
        return self.history.last

    @property
    def initial(self) -> str:
        return self.history.seed

    def _record(self, step: RewriteStep) -> None:
        self.steps.append(step)
        self.history.append(step.after)
        log.debug("History[%d] = %s (%s)", len(self.history) - 1,
                  step.after, step.rule.name)

    def apply(self, rule_name: str) -> bool:
        """
        Apply a rule to the current expression.

        Returns:
            True if the expression changed and was recorded, False if the
            rule does not apply here.

        Raises:
            KeyError: If no rule has that name
        """
        rule = self.engine[rule_name]
        before = self.current
        after = self.engine.apply(rule.name, before)
        if after == before:
            return False
        self._record(RewriteStep(rule, before, after))
        return True

    def apply_many(self, rule_names: Iterable[str]) -> int:
        """Apply rules in order, returning how many changed the expression."""
        return sum(1 for name in rule_names if self.apply(name))

    def apply_repeatedly(self, rule_name: str, max_steps: int = DEFAULT_MAX_STEPS) -> int:
        """
        Apply one rule until it stops changing the expression or cycles.

        Returns:
            Number of steps recorded.
        """
        steps = self.engine.apply_repeatedly(rule_name, self.current, max_steps)
        for step in steps:
            self._record(step)
        return len(steps)

    def apply_path(self, steps: Iterable[RewriteStep]) -> int:
        """
        Replay steps found by RewriteEngine.find_path.

        Each step's rule is re-applied to the current expression, so a path
        found from a different starting point is not blindly trusted.
        """
        return self.apply_many(step.rule.name for step in steps)

    def reset(self, expression: Optional[str] = None) -> None:
        """
        Start over with a fresh history.

        Args:
            expression: New seed, or None to restart from the current seed.
        """
        seed = self.initial if expression is None else expression
        if self.validate:
            validate_expression(seed)
        self.history = History(seed)
        self.steps = []
        log.debug("Session reset to %s", seed)

    def format(self, style: str = "verbose") -> str:
        """
        Format the session in different styles.

        Args:
            style: One of "verbose", "compact", "rules", "chain"

        Returns:
            Formatted string representation of the session.
        """
        if style == "compact":
            rules = ", ".join(self.rules_applied())
            return f"{self.initial} --[{rules}]--> {self.current}"

        elif style == "rules":
            rules = self.rules_applied()
            return " -> ".join(rules) if rules else "(no rules applied)"

        elif style == "chain":
            parts = [self.initial]
            for step in self.steps:
                parts.append(f"  --({step.rule.name})-->")
                parts.append(step.after)
            return "\n".join(parts)

        elif style == "verbose":
            return repr(self)

        raise ValueError(f"Unknown format style: {style}. "
                         f"Valid options: {', '.join(self.FORMAT_STYLES)}")

    def rules_applied(self) -> List[str]:
        """Get list of rule names in order of application."""
        return [step.rule.name for step in self.steps]

    def to_dict(self) -> Dict:
        """Convert session to dictionary for JSON serialization."""
        return {
            "initial": self.initial,
            "current": self.current,
            "history": self.history.to_list(),
            "steps": [step.to_dict() for step in self.steps],
            "step_count": len(self.steps),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __repr__(self) -> str:
        lines = [f"Initial: {self.initial}"]
        for i, step in enumerate(self.steps, 1):
            lines.append(f"  {i}. {step}")
        lines.append(f"Current: {self.current}")
        return "\n".join(lines)

    def __len__(self) -> int:
        """Number of recorded steps."""
        return len(self.steps)

    def __iter__(self) -> Iterator[RewriteStep]:
        return iter(self.steps)
