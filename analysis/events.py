"""
Event Model for the Banker's Safety Simulator.

Defines event types for tracing each pass of the safety algorithm.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class EventType(Enum):
    """Types of events in the simulation."""
    PASS = "pass"
    GRANT = "grant"
    RELEASE = "release"
    FINISH = "finish"
    UNSAFE = "unsafe"
    SAFE = "safe"


@dataclass
class SimulationEvent:
    """
    Represents a single event in the simulation.

    Attributes:
        pass_number: Safety pass in which the event occurred (1-based)
        event_type: Type of event
        process_id: PID involved in event (-1 for system-wide events)
        amounts: Resource vector involved (if applicable)
        message: Human-readable description
    """
    pass_number: int
    event_type: EventType
    process_id: int = -1
    amounts: Optional[List[int]] = None
    message: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"Pass {self.pass_number}"

        if self.event_type == EventType.PASS:
            return f"{base}: {self.message}"
        elif self.event_type == EventType.GRANT:
            return f"{base}: P{self.process_id} granted need {self.amounts} ({self.message})"
        elif self.event_type == EventType.RELEASE:
            return f"{base}: P{self.process_id} releases {self.amounts}"
        elif self.event_type == EventType.FINISH:
            return f"{base}: P{self.process_id} - FINISHED ({self.message})"
        elif self.event_type == EventType.UNSAFE:
            return f"{base}: UNSAFE ({self.message})"
        elif self.event_type == EventType.SAFE:
            return f"{base}: SAFE ({self.message})"
        else:
            return f"{base}: {self.event_type.value}: {self.message}"


@dataclass
class EventLog:
    """Collection of simulation events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event: SimulationEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_pass(self, pass_number: int) -> list:
        """Get all events from a specific pass."""
        return [e for e in self.events if e.pass_number == pass_number]

    def completion_order(self) -> List[int]:
        """PIDs in the order their FINISH events were recorded."""
        return [e.process_id for e in self.get_events_by_type(EventType.FINISH)]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
