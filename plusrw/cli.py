#!/usr/bin/env python3
"""
plusrw Command-Line Interface

Provides an interactive REPL, one-shot rule application, path search and
a pipe/filter mode.

Usage:
    plusrw                                  # REPL from ((x + y) + z)
    plusrw -e "(a + (b + c))"               # REPL from another expression
    plusrw -e "((x + y) + z)" -a assoc -a parens   # Apply rules, print history
    plusrw -e "((x + y) + z)" --goal "(z + (x + y))"   # Search for a path
    plusrw -l                               # List rules
    printf 'assoc\\ncomm\\n' | plusrw       # Filter mode: one rule per line

REPL Commands:
    :help              Show help
    :rules             List rules
    :history           Show the history
    :expr EXPR         Start over from EXPR
    :reset             Start over from the seed expression
    :repeat RULE       Apply RULE until it stops changing the expression
    :search GOAL       Find and apply a path to GOAL
    :json              Show the session as JSON
    :quit              Exit

Any other input is a rule name, alias or 1-based rule number. The -a option
and filter mode accept the same rule tokens.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .engine import DEFAULT_MAX_DEPTH, RewriteEngine
from .session import DEFAULT_EXPRESSION, Session, validate_expression

log = logging.getLogger(__name__)

# Try to import readline for better REPL experience
try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False

OUTPUT_FORMATS = ["chain", "verbose", "compact", "rules", "json"]


def resolve_rule(engine: RewriteEngine, token: str) -> Optional[str]:
    """Turn a rule name, alias or 1-based number into a rule name."""
    if token.isdigit():
        idx = int(token) - 1
        if 0 <= idx < len(engine):
            return engine.rules[idx].name
        return None
    rule = engine.get_rule(token)
    return rule.name if rule else None


class PlusrwCompleter:
    """Tab completer for the plusrw REPL."""

    COMMANDS = [
        ":help", ":quit", ":exit", ":q",
        ":rules", ":history", ":expr", ":reset",
        ":repeat", ":search", ":json",
    ]

    def __init__(self, repl: 'PlusrwREPL'):
        self.repl = repl
        self.matches: List[str] = []

    def complete(self, text: str, state: int) -> Optional[str]:
        """Return the next possible completion for 'text'."""
        if state == 0:
            line = readline.get_line_buffer() if HAS_READLINE else ""
            self.matches = self._get_matches(text, line)

        try:
            return self.matches[state]
        except IndexError:
            return None

    def _get_matches(self, text: str, line: str) -> list:
        """Get list of matches for the current input."""
        line = line.lstrip()
        rule_names = [rule.name for rule in self.repl.session.engine]

        # After :repeat, complete rule names
        if line.startswith(":repeat "):
            return [r for r in rule_names if r.startswith(text)]

        if text.startswith(":") or (line.startswith(":") and " " not in line):
            return [c for c in self.COMMANDS if c.startswith(text)]

        return [r for r in rule_names if r.startswith(text)]


class PlusrwREPL:
    """Interactive REPL for plusrw."""

    def __init__(self, expression: str = DEFAULT_EXPRESSION,
                 engine: Optional[RewriteEngine] = None):
        self.session = Session(expression, engine=engine)
        self.running = True

        if HAS_READLINE:
            self.history_file = Path.home() / ".plusrw_history"
            try:
                readline.read_history_file(self.history_file)
            except (FileNotFoundError, OSError):
                pass
            readline.set_history_length(1000)

            self.completer = PlusrwCompleter(self)
            readline.set_completer(self.completer.complete)
            readline.parse_and_bind("tab: complete")
            readline.set_completer_delims(" \t\n")

    def save_history(self):
        """Save readline history."""
        if HAS_READLINE:
            try:
                readline.write_history_file(self.history_file)
            except OSError as e:
                log.warning("Could not save history to %s: %s", self.history_file, e)

    def rules_text(self) -> str:
        lines = []
        for i, rule in enumerate(self.session.engine, 1):
            lines.append(f"  {i}. {rule.name:<20} {rule.description}")
        return "\n".join(lines)

    def history_text(self) -> str:
        return "\n".join(f"  {i}. {expr}" for i, expr in enumerate(self.session.history))

    def resolve_rule(self, token: str) -> Optional[str]:
        return resolve_rule(self.session.engine, token)

    def handle_command(self, line: str) -> Optional[str]:
        """
        Handle a REPL command (starts with :).

        Returns a message to print, or None.
        """
        parts = line[1:].split(None, 1)
        if not parts:
            return "Unknown command. Type :help for help."

        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd == "help":
            return self.help_text()

        elif cmd == "quit" or cmd == "exit" or cmd == "q":
            self.running = False
            return None

        elif cmd == "rules":
            return self.rules_text()

        elif cmd == "history":
            return self.history_text()

        elif cmd == "expr":
            if not arg:
                return "Usage: :expr EXPRESSION"
            try:
                self.session.reset(arg)
            except ValueError as e:
                return f"Error: {e}"
            return f"Current: {self.session.current}"

        elif cmd == "reset":
            self.session.reset()
            return f"Current: {self.session.current}"

        elif cmd == "repeat":
            if not arg:
                return "Usage: :repeat RULE"
            name = self.resolve_rule(arg)
            if name is None:
                return f"Unknown rule: {arg}"
            count = self.session.apply_repeatedly(name)
            return f"{self.session.current}  ({name} x{count})"

        elif cmd == "search":
            if not arg:
                return "Usage: :search GOAL"
            try:
                validate_expression(arg)
            except ValueError as e:
                return f"Error: {e}"
            path = self.session.engine.find_path(self.session.current, arg)
            if path is None:
                return f"No path to {arg} within {DEFAULT_MAX_DEPTH} steps"
            self.session.apply_path(path)
            names = " -> ".join(step.rule.name for step in path) or "(already there)"
            return f"{self.session.current}  ({names})"

        elif cmd == "json":
            return self.session.to_json()

        else:
            return f"Unknown command: {cmd}. Type :help for help."

    def help_text(self) -> str:
        """Return help text."""
        return f"""plusrw REPL Commands:
  :help              Show this help
  :rules             List rules
  :history           Show the history
  :expr EXPR         Start over from EXPR
  :reset             Start over from the seed expression
  :repeat RULE       Apply RULE until it stops changing the expression
  :search GOAL       Find and apply a path to GOAL
  :json              Show the session as JSON
  :quit              Exit

Rules (type a name, alias or number to apply it):
{self.rules_text()}
"""

    def process_line(self, line: str) -> Optional[str]:
        """
        Process a single line of input.

        Returns the result to print, or None.
        """
        line = line.strip()

        # Empty line or comment
        if not line or line.startswith("#"):
            return None

        if line.startswith(":"):
            return self.handle_command(line)

        name = self.resolve_rule(line)
        if name is None:
            return f"Unknown rule: {line}. Type :rules to list rules."

        before = self.session.current
        if self.session.apply(name):
            return self.session.current
        return f"{name} does not apply to {before}"

    def run(self):
        """Run the REPL loop."""
        print("plusrw - rewriting sums one rule at a time")
        print("Type :help for help, :quit to exit")
        print()
        print(f"Current: {self.session.current}")

        while self.running:
            try:
                line = input("plusrw> ")
                result = self.process_line(line)
                if result:
                    print(result)

            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print()
                continue

        self.save_history()


class Runner:
    """Runs plusrw non-interactively."""

    def __init__(self, expression: str = DEFAULT_EXPRESSION, output_format: str = "chain"):
        self.session = Session(expression)
        self.output_format = output_format

    def render_session(self) -> str:
        if self.output_format == "json":
            return self.session.to_json()
        return self.session.format(self.output_format)

    def run_rules(self, rule_names: List[str]) -> int:
        """
        Apply rules in order and print the session.

        Rules are given by name, alias or 1-based number. Rules that do not
        apply are reported on stderr and skipped.

        Returns:
            Exit code (0 for success)
        """
        for token in rule_names:
            name = resolve_rule(self.session.engine, token) or token
            try:
                changed = self.session.apply(name)
            except KeyError as e:
                print(f"Error: {e.args[0]}", file=sys.stderr)
                return 1
            if not changed:
                print(f"{name} does not apply to {self.session.current}", file=sys.stderr)

        print(self.render_session())
        return 0

    def run_search(self, goal: str, max_depth: int = DEFAULT_MAX_DEPTH) -> int:
        """
        Find a path to goal, apply it and print the session.

        Returns:
            Exit code (0 if a path was found, 1 otherwise)
        """
        try:
            validate_expression(goal)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        path = self.session.engine.find_path(self.session.current, goal, max_depth)
        if path is None:
            print(f"No path to {goal} within {max_depth} steps", file=sys.stderr)
            return 1

        self.session.apply_path(path)
        print(self.render_session())
        return 0

    def run_stdin(self) -> int:
        """
        Read rule names from stdin, one per line, and print the session.

        Returns:
            Exit code (0 for success)
        """
        names = []
        for line in sys.stdin:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            names.append(line)
        return self.run_rules(names)


def configure_logging(verbosity: int, quiet: bool = False) -> None:
    if quiet:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s  %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="plusrw",
        description="plusrw - rewrite sums with associativity, commutativity and parentheses",
        epilog="Examples:\n"
               "  plusrw                                   Start REPL\n"
               "  plusrw -e '(a + (b + c))'                REPL from another expression\n"
               "  plusrw -a assoc -a parens                Apply rules to the default\n"
               "  plusrw --goal '(z + (x + y))'            Search for a path\n"
               "  printf 'assoc\\ncomm\\n' | plusrw          Filter mode\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "-e", "--expr",
        default=DEFAULT_EXPRESSION,
        help=f"Seed expression (default: {DEFAULT_EXPRESSION})"
    )

    parser.add_argument(
        "-a", "--apply",
        action="append",
        default=[],
        metavar="RULE",
        help="Apply a rule by name, alias or number (repeatable)"
    )

    parser.add_argument(
        "-f", "--format",
        default="chain",
        choices=OUTPUT_FORMATS,
        help="Output format for non-interactive modes"
    )

    parser.add_argument(
        "--goal",
        help="Search for a sequence of rules leading to GOAL"
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum path length for --goal (default: {DEFAULT_MAX_DEPTH})"
    )

    parser.add_argument(
        "-l", "--list-rules",
        action="store_true",
        help="List rules and exit"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log more (-v for info, -vv for debug)"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    if args.list_rules:
        for i, rule in enumerate(RewriteEngine(), 1):
            print(f"{i}. {rule.name}: {rule.description}")
        sys.exit(0)

    try:
        runner = Runner(args.expr, output_format=args.format)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.goal:
        sys.exit(runner.run_search(args.goal, args.max_depth))

    elif args.apply:
        sys.exit(runner.run_rules(args.apply))

    elif not sys.stdin.isatty():
        # Pipe/filter mode (stdin is not a terminal)
        sys.exit(runner.run_stdin())

    else:
        PlusrwREPL(args.expr).run()


if __name__ == "__main__":
    main()
