"""Test runner for Monkey .tests spec files.

Each directory holds *.tests files in the format:

    === test name
    source code here
    ---
    expected output
    ---

Expected is either the exact output or `error: <message>`, which passes
when any reported error contains <message>.
"""

import signal
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from monkey import MonkeyError, compile_program, parse
from monkey.evaluator import evaluate
from monkey.objects import Error
from monkey.parse import parse_program
from monkey.vm import VM

RUN_TIMEOUT = 5
TESTS_DIR = Path(__file__).parent

TESTS = {
    "monkey_parse": "parser",
    "monkey_eval": "eval",
    "monkey_vm": "vm",
}


# ---------------------------------------------------------------------------
# Timeout
# ---------------------------------------------------------------------------


def _timeout_handler(signum, frame):
    raise TimeoutError("run timed out")


signal.signal(signal.SIGALRM, _timeout_handler)


# ---------------------------------------------------------------------------
# Spec file parsing
# ---------------------------------------------------------------------------


def parse_spec_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_specs(test_dir: Path) -> list[tuple[str, str, str]]:
    """Glob *.tests in test_dir, return (test_id, input, expected) tuples."""
    results = []
    for test_file in sorted(test_dir.glob("*.tests")):
        for name, input_code, expected in parse_spec_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


# ---------------------------------------------------------------------------
# Phase result + assertion checker
# ---------------------------------------------------------------------------


@dataclass
class PhaseResult:
    errors: list[str] = field(default_factory=list)
    output: str = ""


def check_expected(expected: str, result: PhaseResult, phase: str) -> None:
    if expected.startswith("error:"):
        expected_msg = expected[6:].strip()
        if not result.errors:
            pytest.fail(
                f"Expected error containing '{expected_msg}', got: {result.output!r}"
            )
        found = any(expected_msg in e for e in result.errors)
        if not found:
            pytest.fail(
                f"Expected error containing '{expected_msg}', got: {result.errors}"
            )
        return
    if result.errors:
        pytest.fail(f"{phase} failed: {result.errors}")
    if result.output != expected:
        pytest.fail(
            f"Output mismatch in {phase}\n"
            f"  expected: {expected!r}\n"
            f"  actual:   {result.output!r}"
        )


# ---------------------------------------------------------------------------
# Phase runners
# ---------------------------------------------------------------------------


def run_monkey_parse(source: str) -> PhaseResult:
    try:
        signal.alarm(RUN_TIMEOUT)
        program, errors = parse_program(source)
        if errors:
            return PhaseResult(errors=errors)
        return PhaseResult(output=str(program))
    finally:
        signal.alarm(0)


def run_monkey_eval(source: str) -> PhaseResult:
    try:
        signal.alarm(RUN_TIMEOUT)
        result = evaluate(parse(source))
        if isinstance(result, Error):
            return PhaseResult(errors=[result.message])
        return PhaseResult(output=result.inspect())
    except MonkeyError as e:
        return PhaseResult(errors=[str(e)])
    finally:
        signal.alarm(0)


def run_monkey_vm(source: str) -> PhaseResult:
    try:
        signal.alarm(RUN_TIMEOUT)
        machine = VM(compile_program(source))
        machine.run()
        top = machine.stack_top()
        return PhaseResult(output=top.inspect() if top is not None else "")
    except MonkeyError as e:
        return PhaseResult(errors=[str(e)])
    finally:
        signal.alarm(0)


# ---------------------------------------------------------------------------
# Parametrization
# ---------------------------------------------------------------------------


def pytest_generate_tests(metafunc):
    for name, subdir in TESTS.items():
        fixture = f"{name}_input"
        if fixture in metafunc.fixturenames:
            specs = discover_specs(TESTS_DIR / subdir)
            params = [pytest.param(inp, exp, id=tid) for tid, inp, exp in specs]
            metafunc.parametrize(f"{fixture},{name}_expected", params)


# ---------------------------------------------------------------------------
# Test functions
# ---------------------------------------------------------------------------


def test_monkey_parse(monkey_parse_input, monkey_parse_expected):
    check_expected(
        monkey_parse_expected, run_monkey_parse(monkey_parse_input), "monkey_parse"
    )


def test_monkey_eval(monkey_eval_input, monkey_eval_expected):
    check_expected(
        monkey_eval_expected, run_monkey_eval(monkey_eval_input), "monkey_eval"
    )


def test_monkey_vm(monkey_vm_input, monkey_vm_expected):
    check_expected(monkey_vm_expected, run_monkey_vm(monkey_vm_input), "monkey_vm")
