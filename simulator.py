#!/usr/bin/env python3
"""
Banker's Safety Simulator
Main entry point for the safety check.

Reads a snapshot of allocations, maximum demands and available resources,
then decides whether every process can be driven to completion without
deadlock, printing the safe sequence when one exists.
"""

import argparse
import sys
from typing import Optional, Tuple

from models.ledger import ProcessLedger
from utils.scenario_loader import load_ledger, ScenarioLoadError
from utils.logger import SimulatorLogger
from algorithms.avoidance import (
    SafetyResult,
    SAFE_MESSAGE,
    UNSAFE_MESSAGE,
    run_bankers_algorithm,
    is_safe_state,
)
from analysis.events import EventLog, EventType
from analysis.metrics import SafetyMetrics, format_metrics_report

DEFAULT_DATA_FILE = "resource_allocation.txt"

EXIT_SAFE = 0
EXIT_ERROR = 1
EXIT_UNSAFE = 2


def run_simulation(
    data_path: str,
    fmt: str = "auto",
    verbose: bool = False,
    log_file: Optional[str] = None,
    show_metrics: bool = False
) -> Optional[Tuple[SafetyResult, EventLog, SafetyMetrics]]:
    """
    Run the safety algorithm on a data file.

    Args:
        data_path: Path to the data file
        fmt: Data format ('auto', 'text', 'json')
        verbose: Enable verbose logging (state tables, pass trace, invariant checks)
        log_file: Optional file to mirror output to
        show_metrics: Print the metrics report at the end

    Returns:
        Tuple of (SafetyResult, EventLog, SafetyMetrics), or None if the
        data file could not be loaded
    """
    logger = SimulatorLogger(verbose=verbose, log_file=log_file)
    event_log = EventLog()
    metrics = SafetyMetrics()

    try:
        ledger = load_ledger(data_path, fmt)
    except ScenarioLoadError as e:
        logger.log(f"Failed to load data: {e}", "error")
        logger.close()
        return None

    logger.log(f"Data: {data_path}", "debug")
    _display_initial_state(ledger, logger)

    result = run_bankers_algorithm(ledger, event_log, metrics)

    _log_trace(event_log, logger)

    if verbose:
        ledger.assert_resource_conservation("after final pass")
        ledger.assert_need_invariant("after final pass")
        logger.log_system_state(ledger.display())
        logger.log(f"Event Trace:\n{event_log.display()}", "debug")

    if not result.is_safe:
        logger.log_unsafe(result.passes, result.blocked)

    logger.log_result(result)

    if show_metrics:
        verdict = "SAFE" if result.is_safe else "UNSAFE"
        logger.log(format_metrics_report(metrics, verbose, data_path, verdict))

    logger.close()
    return result, event_log, metrics


def check_only(data_path: str, fmt: str = "auto", verbose: bool = False) -> Optional[bool]:
    """
    Report the verdict without driving the processes to completion.

    Returns:
        True if safe, False if unsafe, None if the data file could not be loaded
    """
    logger = SimulatorLogger(verbose=verbose)
    try:
        ledger = load_ledger(data_path, fmt)
    except ScenarioLoadError as e:
        logger.log(f"Failed to load data: {e}", "error")
        return None

    _display_initial_state(ledger, logger)
    safe, sequence = is_safe_state(ledger)

    if safe:
        logger.log(SAFE_MESSAGE)
        logger.log("Witness sequence: <" + ", ".join(f"P{pid}" for pid in sequence) + ">")
    else:
        logger.log(UNSAFE_MESSAGE)

    logger.close()
    return safe


def _display_initial_state(ledger: ProcessLedger, logger: SimulatorLogger) -> None:
    """Display initial system state."""
    logger.log(
        f"{ledger.num_processes} process(es), {ledger.num_resources} resource type(s)",
        "debug"
    )
    logger.log_system_state(ledger.display())


def _log_trace(event_log: EventLog, logger: SimulatorLogger) -> None:
    """Log per-pass events recorded by the algorithm."""
    for event in event_log.events:
        if event.event_type == EventType.PASS:
            logger.log_pass(event.pass_number, event.message)
        elif event.event_type == EventType.FINISH:
            grant = next(
                e for e in event_log.get_events_by_pass(event.pass_number)
                if e.event_type == EventType.GRANT and e.process_id == event.process_id
            )
            logger.log_grant(event.pass_number, event.process_id, grant.amounts, event.message)


def main(argv=None):
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description="Banker's Safety Simulator"
    )
    parser.add_argument(
        '--data',
        type=str,
        default=DEFAULT_DATA_FILE,
        help=f'Path to the data file (default: {DEFAULT_DATA_FILE})'
    )
    parser.add_argument(
        '--format',
        choices=['auto', 'text', 'json'],
        default='auto',
        help='Data file format (default: auto, by file extension)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write output to this file'
    )
    parser.add_argument(
        '--metrics',
        action='store_true',
        help='Print the metrics report after the verdict'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Only check safety, without driving processes to completion'
    )

    args = parser.parse_args(argv)

    if args.check_only and (args.metrics or args.log_file):
        parser.error('--check-only cannot be combined with --metrics or --log-file')

    if args.check_only:
        safe = check_only(args.data, args.format, args.verbose)
        if safe is None:
            return EXIT_ERROR
        return EXIT_SAFE if safe else EXIT_UNSAFE

    outcome = run_simulation(
        args.data,
        fmt=args.format,
        verbose=args.verbose,
        log_file=args.log_file,
        show_metrics=args.metrics
    )
    if outcome is None:
        return EXIT_ERROR

    result, _, _ = outcome
    return EXIT_SAFE if result.is_safe else EXIT_UNSAFE


if __name__ == '__main__':
    sys.exit(main())
