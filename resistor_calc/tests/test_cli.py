"""
Tests for the command-line front end.

Validates:
1. Reference regulator run prints the combination count and best matches
2. Parse errors print a caret pointer and exit with status 2
3. Degenerate or rejected input exits non-zero without a traceback
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from resistor_calc.cli import build_parser, main


REGULATOR_ARGS = [
    '-s', 'E24', 'E6', 'E24',
    '-b', 'R1+R2+R3 <= 1e6',
    '-b', 'R1+R2+R3 >= 1e4',
    '-b', '0.8*(1+R1/R3) ~ 6.0',
    '-b', '0.8*(1+(R1+R2)/R3) ~ 12.0',
]


class TestMain:
    """Test end-to-end CLI runs."""

    def test_reference_run(self, capsys):
        assert main(REGULATOR_ARGS + ['-n', '2', '-w', '2']) == 0
        out = capsys.readouterr().out
        assert out.startswith("Number of combinations: 1185408\n")
        assert "Match 1:\nError: 0.000\nValues: R1: 13K, R2: 15K, R3: 2K\n" in out
        assert "Match 2:\nError: 0.000\nValues: R1: 130K, R2: 150K, R3: 20K\n" in out
        assert "Match 3:" not in out

    def test_all_best(self, capsys):
        assert main(['-s', 'E3', 'E3', '-b', 'R1 + R2 ~ 500', '--all-best']) == 0
        out = capsys.readouterr().out
        assert "Values: R1: 22R, R2: 470R" in out
        assert "Values: R1: 470R, R2: 22R" in out
        assert "Match 3:" not in out

    def test_eng_notation(self, capsys):
        assert main(['-s', 'E6', '-b', 'R1 ~ 4700', '-n', '1', '--notation', 'eng']) == 0
        assert "Values: R1: 4.7kΩ" in capsys.readouterr().out

    def test_lowercase_series(self, capsys):
        assert main(['-s', 'e3', '-b', 'R1 ~ 1', '-n', '1']) == 0
        assert "Number of combinations: 21" in capsys.readouterr().out

    def test_custom_names(self, capsys):
        assert main(['-s', 'E6', 'E6', '--names', 'A1', 'B1', '-b', 'A1 / B1 ~ 2.2', '-n', '1']) == 0
        assert "Values: A1: " in capsys.readouterr().out

    def test_timeout_reports_partial(self, capsys):
        assert main(['-s', 'E6', 'E6', '-b', 'R1 ~ R2', '--timeout', '0']) == 0
        assert "Search stopped early: explored 0 of 1764 combinations" in capsys.readouterr().out


class TestErrors:
    """Test error reporting and exit codes."""

    def test_parse_error_pointer(self, capsys):
        assert main(['-s', 'E6', '-b', 'R1 <> 10']) == 2
        err = capsys.readouterr().err
        assert err.startswith("error: ")
        assert "R1 <> 10\n   ^" in err

    def test_missing_operator(self, capsys):
        assert main(['-s', 'E6', '-b', 'R1 + 10']) == 2
        assert "missing operator" in capsys.readouterr().err

    def test_unknown_variable(self, capsys):
        assert main(['-s', 'E6', '-b', 'R2 ~ 10']) == 2
        assert "R2" in capsys.readouterr().err

    def test_division_by_zero(self, capsys):
        assert main(['-s', 'E3', 'E3', '-b', 'R1 / (R1 - R2) ~ 1']) == 2
        assert "division by zero" in capsys.readouterr().err

    def test_unknown_series(self):
        with pytest.raises(SystemExit) as exc:
            main(['-s', 'E192', '-b', 'R1 ~ 1'])
        assert exc.value.code == 2

    def test_name_count_mismatch(self):
        with pytest.raises(SystemExit) as exc:
            main(['-s', 'E6', 'E6', '--names', 'A1', '-b', 'A1 ~ 1'])
        assert exc.value.code == 2


class TestParser:
    """Test argument parsing."""

    def test_bounds_accumulate(self):
        args = build_parser().parse_args(['-s', 'E24', '-b', 'R1 ~ 1', '-b', 'R1 <= 5'])
        assert args.bounds == ['R1 ~ 1', 'R1 <= 5']
        assert args.series == ['E24']

    def test_series_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['-b', 'R1 ~ 1'])
