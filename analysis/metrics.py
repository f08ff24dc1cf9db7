"""
Metrics Tracking for the Banker's Safety Simulator.

Tracks per-pass figures while the safety algorithm runs.
"""

from dataclasses import dataclass, field
from typing import List
import statistics


@dataclass
class SafetyMetrics:
    """
    Accumulated metrics for a single safety run.

    Tracks:
    1. Passes needed to reach a verdict
    2. Processes granted per pass
    3. Safe candidates found at the start of each pass
    4. Resource utilization %: (allocated/total) x 100 at the start of each pass
    """
    total_passes: int = 0
    total_processes: int = 0
    completed_processes: int = 0

    grants_per_pass: List[int] = field(default_factory=list)
    safe_candidates_per_pass: List[int] = field(default_factory=list)
    utilization_samples: List[float] = field(default_factory=list)

    def record_pass_start(
        self,
        pass_number: int,
        safe_candidates: int,
        allocated_instances: int,
        total_instances: int
    ) -> None:
        """
        Record the state seen at the start of a pass.

        Args:
            pass_number: Current pass (1-based)
            safe_candidates: Running processes safe to serve before any grant
            allocated_instances: Sum of allocated instances across all resources
            total_instances: Sum of total instances across all resources
        """
        self.total_passes = pass_number
        self.safe_candidates_per_pass.append(safe_candidates)

        if total_instances > 0:
            utilization = (allocated_instances / total_instances) * 100
            self.utilization_samples.append(utilization)

    def record_pass_grants(self, grants: int) -> None:
        """Record how many processes finished during the pass."""
        self.grants_per_pass.append(grants)
        self.completed_processes += grants

    def set_total_processes(self, count: int) -> None:
        self.total_processes = count

    def get_avg_grants_per_pass(self) -> float:
        """Average number of processes finished per pass."""
        if not self.grants_per_pass:
            return 0.0
        return statistics.mean(self.grants_per_pass)

    def get_avg_utilization(self) -> float:
        """Average resource utilization at pass start."""
        if not self.utilization_samples:
            return 0.0
        return statistics.mean(self.utilization_samples)

    def get_completion_ratio(self) -> float:
        """Fraction of processes that finished."""
        if self.total_processes == 0:
            return 1.0
        return self.completed_processes / self.total_processes


def format_metrics_report(
    metrics: SafetyMetrics,
    verbose: bool = False,
    scenario: str = None,
    verdict: str = None
) -> str:
    """
    Format metrics for display at end of a run.

    Args:
        metrics: SafetyMetrics instance with collected data
        verbose: If True, include per-pass breakdown
        scenario: Data file path
        verdict: SAFE or UNSAFE

    Returns:
        Formatted metrics report string
    """
    lines = []
    lines.append("\n" + "="*60)
    lines.append("SAFETY METRICS")
    lines.append("="*60)

    if scenario:
        lines.append(f"Data: {scenario}")
    if verdict:
        lines.append(f"Verdict: {verdict}")
    if scenario or verdict:
        lines.append("")

    lines.append(f"Total Passes: {metrics.total_passes}")
    lines.append(f"Total Processes: {metrics.total_processes}")
    lines.append(f"Completed Processes: {metrics.completed_processes}")
    lines.append(f"Completion Ratio: {metrics.get_completion_ratio():.2%}")
    lines.append(f"Average Grants per Pass: {metrics.get_avg_grants_per_pass():.2f}")
    lines.append(f"Average Utilization at Pass Start: {metrics.get_avg_utilization():.2f}%")

    if verbose and metrics.safe_candidates_per_pass:
        lines.append("")
        lines.append("PER-PASS SUMMARY:")
        lines.append("-" * 60)
        for i, candidates in enumerate(metrics.safe_candidates_per_pass):
            grants = metrics.grants_per_pass[i] if i < len(metrics.grants_per_pass) else 0
            lines.append(f"  Pass {i + 1}: safe at start={candidates:2} | granted={grants:2}")

    lines.append("="*60)
    return "\n".join(lines)
