from __future__ import annotations

from stepcore.domain.errors import Ambiguous, CapturedError, Pending, TableMismatch, Undefined
from stepcore.domain.tables import Table
from stepcore.kernel.binding import StepDefinition


def test_undefined_message_names_the_step() -> None:
    # Undefined errors quote the step text and are top-level by default.
    error = Undefined("I have cukes")
    assert str(error) == 'Undefined step: "I have cukes"'
    assert error.nested is False
    assert error.backtrace is None


def test_ambiguous_lists_candidates_and_their_locations() -> None:
    # Candidate locations become the error's own frames.
    def first() -> None:
        return None

    def second() -> None:
        return None

    candidates = [
        StepDefinition.compile("I have cukes", first).match("I have cukes"),
        StepDefinition.compile(r"I have \w+", second).match("I have cukes"),
    ]
    error = Ambiguous("I have cukes", [candidate for candidate in candidates if candidate is not None])
    assert 'Ambiguous match of "I have cukes"' in str(error)
    assert error.backtrace is not None
    assert len(error.backtrace) == 2
    assert all(frame.startswith(__file__) for frame in error.backtrace)


def test_pending_defaults_to_todo() -> None:
    assert str(Pending()) == "TODO"


def test_table_mismatch_carries_the_produced_table() -> None:
    # The produced table is kept for reporting.
    table = Table([["a"]])
    assert TableMismatch(table).table is table


def test_captured_error_classification() -> None:
    # Classification reads the wrapped error.
    nested = Undefined("x", nested=True)
    assert CapturedError(nested).undefined is True
    assert CapturedError(nested).nested is True
    plain = CapturedError(ValueError("boom"), ("a.py:1",))
    assert plain.undefined is False
    assert plain.nested is False
    assert plain.type_name == "ValueError"
    assert plain.message == "boom"
