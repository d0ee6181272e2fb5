"""Tests for CLI module."""

import json

import pytest

from plusrw.cli import PlusrwREPL, Runner, main, configure_logging


class TestREPLRules:
    """Tests for applying rules from the REPL."""

    def test_apply_by_name(self):
        repl = PlusrwREPL()
        assert repl.process_line("associativity") == "(x + (y + z))"
        assert len(repl.session.history) == 2

    def test_apply_by_number(self):
        repl = PlusrwREPL()
        assert repl.process_line("2") == "(z + (x + y))"

    def test_apply_by_alias(self):
        repl = PlusrwREPL()
        assert repl.process_line("parens") == "(x + y + z)"

    def test_noop_message(self):
        repl = PlusrwREPL("x")
        result = repl.process_line("commutativity")
        assert "does not apply" in result
        assert len(repl.session.history) == 1

    def test_unknown_rule(self):
        repl = PlusrwREPL()
        assert "Unknown rule" in repl.process_line("distributivity")
        assert "Unknown rule" in repl.process_line("4")
        assert "Unknown rule" in repl.process_line("0")

    def test_blank_and_comment(self):
        repl = PlusrwREPL()
        assert repl.process_line("") is None
        assert repl.process_line("# a comment") is None


class TestREPLCommands:
    """Tests for REPL command handling."""

    def test_help_command(self):
        repl = PlusrwREPL()
        result = repl.handle_command(":help")
        assert "help" in result.lower()
        assert "associativity" in result

    def test_rules_command(self):
        repl = PlusrwREPL()
        result = repl.handle_command(":rules")
        lines = result.splitlines()
        assert len(lines) == 3
        assert "1. associativity" in lines[0]
        assert "parenthesis-removal" in lines[2]

    def test_history_command(self):
        repl = PlusrwREPL()
        repl.process_line("assoc")
        result = repl.handle_command(":history")
        assert result.splitlines() == ["  0. ((x + y) + z)", "  1. (x + (y + z))"]

    def test_expr_command(self):
        repl = PlusrwREPL()
        repl.process_line("assoc")
        assert repl.handle_command(":expr (a + b)") == "Current: (a + b)"
        assert repl.session.history.to_list() == ["(a + b)"]

    def test_expr_command_invalid(self):
        repl = PlusrwREPL()
        result = repl.handle_command(":expr a - b")
        assert result.startswith("Error")
        assert repl.session.current == "((x + y) + z)"

    def test_expr_command_usage(self):
        repl = PlusrwREPL()
        assert "Usage" in repl.handle_command(":expr")

    def test_reset_command(self):
        repl = PlusrwREPL()
        repl.process_line("assoc")
        assert repl.handle_command(":reset") == "Current: ((x + y) + z)"
        assert len(repl.session.history) == 1

    def test_repeat_command(self):
        repl = PlusrwREPL("(((a + b) + c) + d)")
        result = repl.handle_command(":repeat parens")
        assert result == "((a + b + c) + d)  (parenthesis-removal x1)"

    def test_repeat_unknown_rule(self):
        repl = PlusrwREPL()
        assert "Unknown rule" in repl.handle_command(":repeat distributivity")

    def test_search_command(self):
        repl = PlusrwREPL()
        result = repl.handle_command(":search ((y + z) + x)")
        assert result == "((y + z) + x)  (associativity -> commutativity)"
        assert len(repl.session.history) == 3

    def test_search_no_path(self):
        repl = PlusrwREPL()
        result = repl.handle_command(":search ((y + x) + z)")
        assert result.startswith("No path")
        assert len(repl.session.history) == 1

    def test_search_invalid_goal(self):
        repl = PlusrwREPL()
        assert repl.handle_command(":search x -").startswith("Error")

    def test_json_command(self):
        repl = PlusrwREPL()
        repl.process_line("assoc")
        data = json.loads(repl.handle_command(":json"))
        assert data["history"] == ["((x + y) + z)", "(x + (y + z))"]

    def test_quit_command(self):
        repl = PlusrwREPL()
        assert repl.running == True
        repl.handle_command(":quit")
        assert repl.running == False

    def test_unknown_command(self):
        repl = PlusrwREPL()
        assert "Unknown command" in repl.handle_command(":frobnicate")
        assert "Unknown command" in repl.handle_command(":")


class TestRunner:
    """Tests for non-interactive runs."""

    def test_run_rules(self, capsys):
        runner = Runner()
        assert runner.run_rules(["assoc", "parens"]) == 0
        out = capsys.readouterr().out
        assert out.splitlines()[-1] == "(x + y + z)"

    def test_run_rules_noop_reported(self, capsys):
        runner = Runner("x")
        assert runner.run_rules(["commutativity"]) == 0
        captured = capsys.readouterr()
        assert "does not apply" in captured.err
        assert captured.out.strip() == "x"

    def test_run_rules_unknown(self, capsys):
        runner = Runner()
        assert runner.run_rules(["distributivity"]) == 1
        assert "No rule named" in capsys.readouterr().err

    def test_run_rules_by_number(self, capsys):
        runner = Runner(output_format="rules")
        assert runner.run_rules(["1", "3"]) == 0
        assert capsys.readouterr().out.strip() == "associativity -> parenthesis-removal"

    def test_run_rules_number_out_of_range(self, capsys):
        runner = Runner()
        assert runner.run_rules(["4"]) == 1
        assert "No rule named" in capsys.readouterr().err

    def test_json_format(self, capsys):
        runner = Runner(output_format="json")
        runner.run_rules(["commutativity"])
        data = json.loads(capsys.readouterr().out)
        assert data["current"] == "(z + (x + y))"

    def test_run_search(self, capsys):
        runner = Runner(output_format="rules")
        assert runner.run_search("(x + (y + z))") == 0
        assert capsys.readouterr().out.strip() == "associativity"

    def test_run_search_no_path(self, capsys):
        runner = Runner()
        assert runner.run_search("((y + x) + z)") == 1
        assert "No path" in capsys.readouterr().err

    def test_run_stdin(self, capsys, monkeypatch):
        import io
        monkeypatch.setattr("sys.stdin", io.StringIO("assoc\n\n# skip\ncomm\n"))
        runner = Runner(output_format="rules")
        assert runner.run_stdin() == 0
        assert capsys.readouterr().out.strip() == "associativity -> commutativity"

    def test_run_stdin_by_number(self, capsys, monkeypatch):
        import io
        monkeypatch.setattr("sys.stdin", io.StringIO("1\n2\n"))
        runner = Runner(output_format="rules")
        assert runner.run_stdin() == 0
        assert capsys.readouterr().out.strip() == "associativity -> commutativity"


class TestMain:
    """Tests for the argparse entry point."""

    def test_list_rules(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-l"])
        assert exc.value.code == 0
        out = capsys.readouterr().out
        assert "1. associativity" in out
        assert "3. parenthesis-removal" in out

    def test_apply(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-e", "(x + (y + z))", "-a", "commutativity", "-f", "compact"])
        assert exc.value.code == 0
        assert capsys.readouterr().out.strip() == \
            "(x + (y + z)) --[commutativity]--> ((y + z) + x)"

    def test_invalid_expression(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-e", "x - y", "-a", "assoc"])
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_apply_by_number(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["-a", "2", "-f", "rules"])
        assert exc.value.code == 0
        assert capsys.readouterr().out.strip() == "commutativity"

    def test_overlong_expression(self, capsys):
        long_sum = " + ".join(f"v{i}" for i in range(1200))
        with pytest.raises(SystemExit) as exc:
            main(["-e", long_sum, "-a", "assoc"])
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_goal(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--goal", "(z + (x + y))", "-f", "rules"])
        assert exc.value.code == 0
        assert capsys.readouterr().out.strip() == "commutativity"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "plusrw" in capsys.readouterr().out


class TestLogging:
    """Tests for verbosity flags."""

    @pytest.mark.parametrize("verbosity,quiet,level", [
        (0, False, "WARNING"),
        (1, False, "INFO"),
        (2, False, "DEBUG"),
        (2, True, "ERROR"),
    ])
    def test_levels(self, monkeypatch, verbosity, quiet, level):
        import logging
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        configure_logging(verbosity, quiet)
        assert logging.getLevelName(calls["level"]) == level
