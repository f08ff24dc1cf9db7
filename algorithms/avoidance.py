"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the Simulator.

Drives every process toward completion one safety pass at a time, granting
each process its full remaining need as soon as the shared pool can cover
it, until all processes finish (safe) or none can be served (unsafe).
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from models.ledger import ProcessLedger
from models.process import ProcessState
from analysis.events import EventLog, SimulationEvent, EventType
from analysis.metrics import SafetyMetrics

SAFE_MESSAGE = "The system is safe!"
UNSAFE_MESSAGE = "The system is in an unsafe state"


@dataclass
class SafetyResult:
    """
    Outcome of a safety run.

    Attributes:
        is_safe: True if every process finished
        safe_sequence: PIDs in the order they were granted and finished
        passes: Number of passes started
        blocked: PIDs still running when the system was declared unsafe
    """
    is_safe: bool
    safe_sequence: List[int] = field(default_factory=list)
    passes: int = 0
    blocked: List[int] = field(default_factory=list)

    def sequence_labels(self) -> List[str]:
        return [f"P{pid}" for pid in self.safe_sequence]

    def format_sequence(self) -> str:
        """Safe sequence as <P1, P3, P4, P0, P2>."""
        return "<" + ", ".join(self.sequence_labels()) + ">"

    def display(self) -> str:
        """Human-readable verdict."""
        if not self.is_safe:
            return UNSAFE_MESSAGE
        return f"{SAFE_MESSAGE}\nSafe sequence: {self.format_sequence()}"


def run_safety_pass(
    ledger: ProcessLedger,
    safe_sequence: List[int],
    pass_number: int,
    event_log: Optional[EventLog] = None,
    metrics: Optional[SafetyMetrics] = None
) -> Tuple[bool, List[int]]:
    """
    Run one pass of the safety algorithm.

    Steps:
    1. Count running processes whose need fits the pool before any grant.
       Zero safe processes while some are running means the system is unsafe.
    2. Scan processes in creation order. Each running process is checked
       against the pool as left by earlier grants in this same pass.
    3. A process found safe is granted its need, releases everything and
       finishes; its PID is appended to safe_sequence.

    Args:
        ledger: Process ledger (mutated)
        safe_sequence: Completion order so far (appended to)
        pass_number: Current pass (1-based, for tracing)
        event_log: Optional event trace
        metrics: Optional metrics accumulator

    Returns:
        Tuple of (progress_possible, pids finished this pass).
        progress_possible is False when the pass found the system unsafe.
    """
    safe_count = ledger.count_safe_running()
    available = ledger.available_vector

    if metrics is not None:
        metrics.record_pass_start(
            pass_number,
            safe_count,
            int(ledger.allocation_matrix.sum()),
            int(ledger.total_resources.sum())
        )

    if event_log is not None:
        event_log.add(SimulationEvent(
            pass_number=pass_number,
            event_type=EventType.PASS,
            amounts=available.tolist(),
            message=(
                f"{safe_count} of {len(ledger.running_processes())} running "
                f"process(es) safe, available {available.tolist()}"
            )
        ))

    if safe_count == 0 and not ledger.all_finished():
        if metrics is not None:
            metrics.record_pass_grants(0)
        return False, []

    finished = []
    for process in ledger.processes:
        if process.state != ProcessState.RUNNING:
            continue

        # Pool already reflects releases from earlier processes in this pass
        if not process.is_safe_to_request():
            continue

        need = process.need_of().to_list()
        # Holds its maximum once granted, and releases all of it on finishing
        released = process.maximum.to_list()
        available_before = ledger.pool.snapshot().to_list()
        if not process.request_and_complete():
            continue

        safe_sequence.append(process.pid)
        finished.append(process.pid)

        if event_log is not None:
            event_log.add(SimulationEvent(
                pass_number=pass_number,
                event_type=EventType.GRANT,
                process_id=process.pid,
                amounts=need,
                message=f"available was {available_before}"
            ))
            event_log.add(SimulationEvent(
                pass_number=pass_number,
                event_type=EventType.RELEASE,
                process_id=process.pid,
                amounts=released
            ))
            event_log.add(SimulationEvent(
                pass_number=pass_number,
                event_type=EventType.FINISH,
                process_id=process.pid,
                message=f"available now {ledger.pool.available.to_list()}"
            ))

    if metrics is not None:
        metrics.record_pass_grants(len(finished))

    return True, finished


def run_bankers_algorithm(
    ledger: ProcessLedger,
    event_log: Optional[EventLog] = None,
    metrics: Optional[SafetyMetrics] = None
) -> SafetyResult:
    """
    Run safety passes until every process finishes or none can proceed.

    Each pass that does not declare the system unsafe finishes at least one
    process, so the number of passes is bounded by the number of processes.

    Args:
        ledger: Process ledger (mutated: processes end FINISHED on success)
        event_log: Optional event trace
        metrics: Optional metrics accumulator

    Returns:
        SafetyResult with the verdict and, if safe, the safe sequence
    """
    if metrics is not None:
        metrics.set_total_processes(ledger.num_processes)

    if ledger.num_processes == 0 or ledger.num_resources == 0:
        if event_log is not None:
            event_log.add(SimulationEvent(
                pass_number=0,
                event_type=EventType.SAFE,
                message="no processes or resource types to schedule"
            ))
        return SafetyResult(is_safe=True)

    safe_sequence = []
    pass_number = 0

    while not ledger.all_finished():
        pass_number += 1
        progress, _ = run_safety_pass(ledger, safe_sequence, pass_number, event_log, metrics)

        if not progress:
            blocked = [p.pid for p in ledger.running_processes()]
            if event_log is not None:
                event_log.add(SimulationEvent(
                    pass_number=pass_number,
                    event_type=EventType.UNSAFE,
                    message="no running process can be served: "
                            + ", ".join(f"P{pid}" for pid in blocked)
                ))
            return SafetyResult(
                is_safe=False,
                safe_sequence=safe_sequence,
                passes=pass_number,
                blocked=blocked
            )

    if event_log is not None:
        event_log.add(SimulationEvent(
            pass_number=pass_number,
            event_type=EventType.SAFE,
            message="sequence " + ", ".join(f"P{pid}" for pid in safe_sequence)
        ))

    return SafetyResult(is_safe=True, safe_sequence=safe_sequence, passes=pass_number)


def is_safe_state(ledger: ProcessLedger) -> Tuple[bool, Optional[List[int]]]:
    """
    Check if the ledger is in a safe state without mutating it.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Find process i where Finish[i] == False and Need[i] <= Work
    3. If found: Finish[i] = True, Work += Allocation[i], add PID to sequence
    4. Repeat step 2 until all processes finish (SAFE) or stuck (UNSAFE)

    The search restarts from the lowest PID after every hit, so the sequence
    can differ from the one run_bankers_algorithm produces; the verdict
    cannot.

    Args:
        ledger: Process ledger (read only)

    Returns:
        Tuple of (is_safe, safe_sequence if exists else None)
    """
    work = ledger.available_vector.copy()
    finish = np.zeros(ledger.num_processes, dtype=bool)
    need_matrix = ledger.need_matrix
    allocation_matrix = ledger.allocation_matrix
    safe_sequence = []

    active_processes = [
        i for i, p in enumerate(ledger.processes)
        if p.state == ProcessState.RUNNING
    ]

    made_progress = True
    while made_progress:
        made_progress = False

        for i in active_processes:
            if finish[i]:
                continue

            if np.all(need_matrix[i] <= work):
                work += allocation_matrix[i]
                finish[i] = True
                safe_sequence.append(ledger.processes[i].pid)
                made_progress = True
                break

    if all(finish[i] for i in active_processes):
        return True, safe_sequence
    return False, None
