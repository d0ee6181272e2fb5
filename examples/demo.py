#!/usr/bin/env python3
"""
plusrw Feature Demonstration

This script walks through the main features of the plusrw library.
"""

from plusrw import (
    E, RewriteEngine, Session,
    apply_rule, list_rules, parse, render, equivalent,
)


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_parsing():
    """Demonstrate parsing and canonical rendering."""
    section("Parsing and Rendering")

    for text in ["x", "x+y", "a + b + c", "(a+b)+(c+d)", "((a+b))"]:
        expr = parse(text)
        print(f"  {text!r:16} -> {expr!r}")
        print(f"  {'':16}    {render(expr)}")


def demo_rules():
    """Demonstrate each rule."""
    section("Rules")

    for meta in list_rules():
        print(f"  {meta['name']:<20} {meta['description']}")

    print()
    examples = [
        ("associativity", "((x + y) + z)"),
        ("associativity", "(x + (y + z))"),
        ("commutativity", "(x + (y + z))"),
        ("parenthesis-removal", "(x + (y + z))"),
        ("commutativity", "x"),
    ]
    for name, text in examples:
        result = apply_rule(name, text)
        note = "  (no-op)" if result == text else ""
        print(f"  {name:<20} {text} => {result}{note}")


def demo_session():
    """Demonstrate a session with history."""
    section("Session History")

    session = Session("((x + y) + z)")
    for name in ["associativity", "associativity", "commutativity", "parenthesis-removal"]:
        changed = session.apply(name)
        print(f"  {name:<20} {'applied' if changed else 'no-op'}")

    print()
    print(session.format("chain"))
    print()
    print(f"  Equivalent to seed: {equivalent(E(session.current), E(session.initial))}")


def demo_search():
    """Demonstrate searching for a rewrite path."""
    section("Path Search")

    engine = RewriteEngine()
    for goal in ["(z + (x + y))", "((y + z) + x)", "((y + x) + z)"]:
        path = engine.find_path("((x + y) + z)", goal)
        if path is None:
            print(f"  {goal}: unreachable")
        else:
            print(f"  {goal}: {' -> '.join(step.rule.name for step in path)}")


if __name__ == "__main__":
    demo_parsing()
    demo_rules()
    demo_session()
    demo_search()
