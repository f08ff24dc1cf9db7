"""
Banker's Algorithm Tests

Runs the safety/completion algorithm over known scenarios and checks the
invariants that must hold between passes.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np

from models.ledger import ProcessLedger
from models.process import ProcessState
from models.resource import MalformedInputError
from algorithms.avoidance import (
    SafetyResult,
    run_bankers_algorithm,
    run_safety_pass,
    is_safe_state,
)
from analysis.events import EventLog, EventType
from analysis.metrics import SafetyMetrics


TEXTBOOK = (
    [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]],
    [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]],
    [3, 3, 2],
)


def _ledger(allocation, maximum, available):
    return ProcessLedger.from_matrices(allocation, maximum, available)


def test_scenario_a_textbook_instance():
    """Classic 5-process / 3-resource instance is safe."""
    ledger = _ledger(*TEXTBOOK)
    result = run_bankers_algorithm(ledger)

    print(f"\n  {result.display()}")
    assert result.is_safe
    assert sorted(result.safe_sequence) == [0, 1, 2, 3, 4]
    assert result.safe_sequence == [1, 3, 4, 0, 2]
    assert result.format_sequence() == "<P1, P3, P4, P0, P2>"
    assert result.passes == 2
    assert ledger.all_finished()
    assert result.display() == "The system is safe!\nSafe sequence: <P1, P3, P4, P0, P2>"


def test_scenario_b_zero_need_process():
    """A single process with maximum == allocated is safe immediately."""
    ledger = _ledger([[2, 1]], [[2, 1]], [0, 0])
    result = run_bankers_algorithm(ledger)

    assert result.is_safe
    assert result.format_sequence() == "<P0>"
    assert result.passes == 1


def test_scenario_c_need_exceeds_availability():
    """A lone process needing more than is available in every type is unsafe."""
    ledger = _ledger([[0, 0]], [[5, 5]], [1, 1])
    result = run_bankers_algorithm(ledger)

    assert not result.is_safe
    assert result.safe_sequence == []
    assert result.blocked == [0]
    assert result.display() == "The system is in an unsafe state"
    assert ledger.processes[0].state == ProcessState.RUNNING


def test_scenario_d_release_unblocks_earlier_process():
    """P0 is blocked until P1 finishes and releases its resources."""
    ledger = _ledger([[1, 0], [1, 1]], [[3, 2], [2, 1]], [1, 1])
    result = run_bankers_algorithm(ledger)

    assert result.is_safe
    assert result.format_sequence() == "<P1, P0>"
    assert result.passes == 2


def test_release_unblocks_later_process_in_same_pass():
    """A process unsafe at the start of a pass can finish later in that pass."""
    ledger = _ledger([[1], [0]], [[1], [2]], [1])
    event_log = EventLog()
    result = run_bankers_algorithm(ledger, event_log)

    assert result.is_safe
    assert result.safe_sequence == [0, 1]
    assert result.passes == 1
    pass_one = event_log.get_events_by_pass(1)
    assert [e.process_id for e in pass_one if e.event_type == EventType.FINISH] == [0, 1]


def test_partial_progress_then_unsafe():
    """Some processes finish before the rest are found blocked."""
    ledger = _ledger([[0, 0], [1, 0]], [[9, 9], [1, 0]], [1, 1])
    result = run_bankers_algorithm(ledger)

    assert not result.is_safe
    assert result.safe_sequence == [1]
    assert result.blocked == [0]
    assert result.passes == 2


def test_empty_system_is_safe():
    """No processes, or no resource types, means nothing to schedule."""
    result = run_bankers_algorithm(_ledger([], [], [1, 2]))
    assert result.is_safe
    assert result.safe_sequence == []
    assert result.format_sequence() == "<>"

    result = run_bankers_algorithm(_ledger([[], []], [[], []], []))
    assert result.is_safe
    assert result.safe_sequence == []
    assert result.passes == 0


def test_invariants_hold_between_passes():
    """Conservation, need invariant and monotonic completion across passes."""
    ledger = _ledger(*TEXTBOOK)
    totals = ledger.total_resources.copy()
    assert totals.tolist() == [10, 5, 7]

    for process in ledger.processes:
        for i in range(ledger.num_resources):
            assert process.need[i] == process.maximum[i] - process.allocated[i]

    safe_sequence = []
    finished_before = 0
    pass_number = 0
    while not ledger.all_finished():
        pass_number += 1
        progress, finished = run_safety_pass(ledger, safe_sequence, pass_number)
        assert progress
        assert finished, "A non-terminal pass must finish at least one process"

        ledger.assert_resource_conservation(f"after pass {pass_number}")
        ledger.assert_need_invariant(f"after pass {pass_number}")

        finished_now = ledger.finished_count()
        assert finished_now >= finished_before
        finished_before = finished_now

    assert np.array_equal(ledger.available_vector, totals)
    assert pass_number <= ledger.num_processes


def test_determinism():
    """Identical input gives identical verdict and sequence."""
    first = run_bankers_algorithm(_ledger(*TEXTBOOK))
    second = run_bankers_algorithm(_ledger(*TEXTBOOK))
    assert first == second


def test_dry_run_agrees_and_does_not_mutate():
    """is_safe_state gives the same verdict without touching the ledger."""
    cases = [
        TEXTBOOK,
        ([[2, 1]], [[2, 1]], [0, 0]),
        ([[0, 0]], [[5, 5]], [1, 1]),
        ([[1, 0], [1, 1]], [[3, 2], [2, 1]], [1, 1]),
        ([[0, 0], [1, 0]], [[9, 9], [1, 0]], [1, 1]),
    ]
    for allocation, maximum, available in cases:
        ledger = _ledger(allocation, maximum, available)
        before = ledger.available_vector.copy()

        safe, sequence = is_safe_state(ledger)

        assert np.array_equal(ledger.available_vector, before)
        assert all(p.state == ProcessState.RUNNING for p in ledger.processes)

        result = run_bankers_algorithm(ledger)
        assert safe == result.is_safe
        if safe:
            assert sorted(sequence) == sorted(result.safe_sequence)
        else:
            assert sequence is None


def test_event_trace_and_metrics():
    ledger = _ledger(*TEXTBOOK)
    event_log = EventLog()
    metrics = SafetyMetrics()
    result = run_bankers_algorithm(ledger, event_log, metrics)

    assert event_log.completion_order() == result.safe_sequence
    assert len(event_log.get_events_by_type(EventType.GRANT)) == 5
    assert len(event_log.get_events_by_type(EventType.SAFE)) == 1

    grant_p1 = event_log.get_events_by_type(EventType.GRANT)[0]
    assert grant_p1.process_id == 1
    assert grant_p1.amounts == [1, 2, 2]
    release_p1 = event_log.get_events_by_type(EventType.RELEASE)[0]
    assert release_p1.amounts == [3, 2, 2]

    assert metrics.total_passes == 2
    assert metrics.total_processes == 5
    assert metrics.completed_processes == 5
    assert metrics.grants_per_pass == [3, 2]
    assert metrics.safe_candidates_per_pass == [2, 2]
    assert metrics.get_completion_ratio() == 1.0


def test_unsafe_trace():
    ledger = _ledger([[0, 0]], [[5, 5]], [1, 1])
    event_log = EventLog()
    metrics = SafetyMetrics()
    run_bankers_algorithm(ledger, event_log, metrics)

    unsafe = event_log.get_events_by_type(EventType.UNSAFE)
    assert len(unsafe) == 1
    assert "P0" in unsafe[0].message
    assert metrics.grants_per_pass == [0]
    assert metrics.get_completion_ratio() == 0.0


def test_malformed_matrices_rejected():
    """Shape problems fail before the algorithm runs."""
    bad_inputs = [
        ([[0, 1]], [[1, 1], [1, 1]], [1, 1]),
        ([[0, 1, 0]], [[1, 1]], [1, 1]),
        ([[0, 1]], [[1, 1, 1]], [1, 1]),
        ([[2, 0]], [[1, 1]], [1, 1]),
        ([[0, 0]], [[1, 1]], [1, -1]),
    ]
    for allocation, maximum, available in bad_inputs:
        try:
            _ledger(allocation, maximum, available)
            assert False, f"Should reject {allocation}, {maximum}, {available}"
        except MalformedInputError:
            pass


def test_safety_result_display():
    assert SafetyResult(is_safe=False).display() == "The system is in an unsafe state"
    assert SafetyResult(is_safe=True, safe_sequence=[2, 0]).format_sequence() == "<P2, P0>"


def main():
    """Run all avoidance tests."""
    print("\n" + "="*60)
    print("BANKER'S ALGORITHM TESTS")
    print("="*60)

    tests = [
        test_scenario_a_textbook_instance,
        test_scenario_b_zero_need_process,
        test_scenario_c_need_exceeds_availability,
        test_scenario_d_release_unblocks_earlier_process,
        test_release_unblocks_later_process_in_same_pass,
        test_partial_progress_then_unsafe,
        test_empty_system_is_safe,
        test_invariants_hold_between_passes,
        test_determinism,
        test_dry_run_agrees_and_does_not_mutate,
        test_event_trace_and_metrics,
        test_unsafe_trace,
        test_malformed_matrices_rejected,
        test_safety_result_display,
    ]
    try:
        for test in tests:
            test()
            print(f"  ✓ {test.__name__}")
    except AssertionError as e:
        print(f"\n❌ TEST FAILED: {e}")
        return 1

    print("\n✅ ALL AVOIDANCE TESTS PASSED")
    return 0


if __name__ == '__main__':
    sys.exit(main())
