"""
Rule Engine for plusrw

Wraps an ordered set of rules and applies them to expression text.

    from plusrw import RewriteEngine

    engine = RewriteEngine()
    engine.apply("associativity", "((x + y) + z)")   # => "(x + (y + z))"
    engine.apply("commutativity", "x")               # => "x" (no-op)

Rules are looked up case-insensitively and by alias:

    engine["assoc"]         # the associativity rule
    "parens" in engine      # True

The engine keeps no expression state. Every call parses the text it is
given and returns new text; an unchanged result means the rule did not
apply.
"""

import logging
from collections import deque
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .parser import parse
from .rules import RULES, Rule, canonical_name

log = logging.getLogger(__name__)

# Path search depth and repeated-application limits
DEFAULT_MAX_DEPTH = 6
DEFAULT_MAX_STEPS = 100


class RewriteStep:
    """A single successful rule application."""

    def __init__(self, rule: Rule, before: str, after: str):
        self.rule = rule
        self.before = before
        self.after = after

    def __repr__(self) -> str:
        return f"{self.rule.name}: {self.before} → {self.after}"

    def __eq__(self, other):
        if isinstance(other, RewriteStep):
            return (self.rule.name, self.before, self.after) == \
                   (other.rule.name, other.before, other.after)
        return False

    def to_dict(self) -> Dict:
        """Convert step to dictionary for serialization."""
        return {
            "rule_name": self.rule.name,
            "description": self.rule.description,
            "before": self.before,
            "after": self.after,
        }


class RewriteEngine:
    """
    Applies named rewrite rules to expression text.

    Example:
        engine = RewriteEngine()
        for meta in engine.list_rules():
            print(meta["name"], meta["description"])

        result = engine.apply("commutativity", "(x + (y + z))")
        # => "((y + z) + x)"

        result, rule = engine.apply_once("x")
        # => ("x", None)
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        """
        Initialize a RewriteEngine.

        Args:
            rules: Rules in display order. Default: the built-in RULES.
        """
        self._rules: Tuple[Rule, ...] = tuple(RULES if rules is None else rules)
        self._rule_names: Dict[str, int] = {}
        for idx, rule in enumerate(self._rules):
            if rule.name in self._rule_names:
                raise ValueError(f"Duplicate rule name: {rule.name}")
            self._rule_names[rule.name] = idx

    @property
    def rules(self) -> Tuple[Rule, ...]:
        """Get all rules in display order."""
        return self._rules

    def get_rule(self, name: str) -> Optional[Rule]:
        """Get a rule by name or alias, or None."""
        idx = self._rule_names.get(name)
        if idx is None:
            idx = self._rule_names.get(canonical_name(name))
        return self._rules[idx] if idx is not None else None

    def list_rules(self) -> List[Dict[str, str]]:
        """List {"name", "description"} for every rule in display order."""
        return [rule.to_dict() for rule in self._rules]

    def apply(self, name: str, expr: str) -> str:
        """
        Apply a single rule by name.

        Returns:
            The rewritten text, or expr itself if the rule does not apply.

        Raises:
            KeyError: If no rule has that name
        """
        rule = self[name]
        result = rule.apply(expr)
        if result == expr:
            log.debug("%s does not apply to %s", rule.name, expr)
        else:
            log.debug("%s: %s -> %s", rule.name, expr, result)
        return result

    def apply_once(self, expr: str) -> Tuple[str, Optional[Rule]]:
        """
        Apply the first rule, in display order, that changes the expression.

        Returns:
            Tuple of (result, rule) where rule is None if nothing applied.

        Example:
            result, applied = engine.apply_once("((x + y) + z)")
            if applied:
                print(f"Applied rule: {applied.name}")
        """
        for rule in self._rules:
            result = rule.apply(expr)
            if result != expr:
                log.debug("%s: %s -> %s", rule.name, expr, result)
                return result, rule
        return expr, None

    def rules_matching(self, expr: str) -> List[Rule]:
        """
        Find all rules that would change an expression.

        Useful for showing which moves are available.
        """
        return [rule for rule in self._rules if rule.matches(expr)]

    def apply_repeatedly(self, name: str, expr: str,
                         max_steps: int = DEFAULT_MAX_STEPS) -> List[RewriteStep]:
        """
        Apply one rule until it stops changing the expression.

        Stops early when the rule revisits an expression it already
        produced (commutativity, for example, only ever swaps back and
        forth) or after max_steps applications.

        Returns:
            The steps taken, possibly empty.
        """
        if max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {max_steps}")
        rule = self[name]
        steps: List[RewriteStep] = []
        seen = {expr}
        current = expr
        for _ in range(max_steps):
            result = rule.apply(current)
            if result == current or result in seen:
                break
            steps.append(RewriteStep(rule, current, result))
            seen.add(result)
            current = result
        log.debug("%s applied %d time(s) to %s", rule.name, len(steps), expr)
        return steps

    def find_path(self, start: str, goal: str,
                  max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[List[RewriteStep]]:
        """
        Search for a shortest sequence of rule applications from start to goal.

        The goal is reached by any expression that parses to the same tree
        as goal, so "x + y + z" and "(x + y + z)" are the same target.
        Breadth-first; rules are tried in display order.

        Returns:
            The list of steps (empty if start already matches goal), or
            None if no path of at most max_depth steps exists.

        Example:
            engine.find_path("((x + y) + z)", "(z + (x + y))")
            # => [commutativity: ((x + y) + z) → (z + (x + y))]

            engine.find_path("((x + y) + z)", "((y + x) + z)")
            # => None, rules only rewrite the root
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        target = parse(goal)
        queue = deque([(start, [])])
        seen = {start}

        while queue:
            current, path = queue.popleft()
            if parse(current) == target:
                log.info("Found path of %d step(s) from %s to %s",
                         len(path), start, goal)
                return path
            if len(path) >= max_depth:
                continue
            for rule in self._rules:
                result = rule.apply(current)
                if result == current or result in seen:
                    continue
                seen.add(result)
                queue.append((result, path + [RewriteStep(rule, current, result)]))

        log.info("No path within %d step(s) from %s to %s", max_depth, start, goal)
        return None

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RewriteEngine({len(self._rules)} rules)"

    def __call__(self, name: str, expr: str) -> str:
        """Make engine callable: engine(name, expr) is shorthand for engine.apply(name, expr)."""
        return self.apply(name, expr)

    def __iter__(self) -> Iterator[Rule]:
        """Iterate over rules in display order."""
        return iter(self._rules)

    def __contains__(self, name: str) -> bool:
        """Check if a named rule exists: 'associativity' in engine."""
        return self.get_rule(name) is not None

    def __getitem__(self, name: str) -> Rule:
        """Get rule by name: engine['commutativity']."""
        rule = self.get_rule(name)
        if rule is None:
            raise KeyError(f"No rule named '{name}'")
        return rule
