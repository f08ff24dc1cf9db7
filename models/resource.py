"""
Resource model for the Banker's Safety Simulator.

Provides the fixed-length resource vector used for allocation, maximum,
need and availability, and the shared pool of available resources.
"""

from typing import Iterable, Iterator, List, Optional, Union

import numpy as np


class MalformedInputError(ValueError):
    """Raised when input vectors or matrices have inconsistent shapes or values."""
    pass


class ResourceVector:
    """
    Ordered vector of non-negative counts, one per resource type.

    Invariant:
        len(vector) == number of resource types for the run
        vector[i] >= 0 for all i
    """

    def __init__(
        self,
        values: Iterable[int],
        length: Optional[int] = None,
        label: str = "vector"
    ):
        """
        Build and validate a resource vector.

        Args:
            values: Counts by resource type
            length: Expected resource-type count (skipped if None)
            label: Name used in error messages

        Raises:
            MalformedInputError: If length mismatches or a count is negative
        """
        try:
            data = np.array(list(values), dtype=int)
        except OverflowError:
            raise MalformedInputError(f"{label}: count too large")
        except (TypeError, ValueError) as e:
            raise MalformedInputError(f"{label}: non-integer entry ({e})")

        if data.ndim != 1:
            raise MalformedInputError(f"{label}: expected a flat row of counts")

        if length is not None and len(data) != length:
            raise MalformedInputError(
                f"{label}: has {len(data)} entries, expected {length} "
                f"(one per resource type)"
            )

        negative = np.flatnonzero(data < 0)
        if len(negative) > 0:
            i = int(negative[0])
            raise MalformedInputError(f"{label}: R{i} is negative ({data[i]})")

        self._data = data

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index: int) -> int:
        return int(self._data[index])

    def __setitem__(self, index: int, value: int) -> None:
        if value < 0:
            raise ValueError(f"R{index}: count cannot be negative ({value})")
        self._data[index] = value

    def __iter__(self) -> Iterator[int]:
        return (int(x) for x in self._data)

    def __eq__(self, other) -> bool:
        if isinstance(other, ResourceVector):
            other = other._data
        try:
            other = np.asarray(list(other), dtype=int)
        except (TypeError, ValueError, OverflowError):
            return NotImplemented
        return other.shape == self._data.shape and bool(np.all(self._data == other))

    __hash__ = None

    def fits_within(self, other: Union["ResourceVector", List[int]]) -> bool:
        """True if every count is <= the matching count in other."""
        if isinstance(other, ResourceVector):
            other = other._data
        other = np.asarray(other, dtype=int)
        if other.shape != self._data.shape:
            raise ValueError(
                f"Cannot compare {len(self._data)} resource types with {len(other)}"
            )
        return bool(np.all(self._data <= other))

    def is_zero(self) -> bool:
        """True if every count is zero."""
        return not np.any(self._data)

    def copy(self) -> "ResourceVector":
        return ResourceVector(self._data.copy())

    def to_list(self) -> List[int]:
        return [int(x) for x in self._data]

    def __repr__(self) -> str:
        return f"ResourceVector({self.to_list()})"


class ResourceState:
    """
    Pool of resources not currently allocated to any process.

    One instance exists per run. Every process holds a reference to it,
    and grants/releases mutate it in place.

    Attributes:
        available: Free instances by resource type
    """

    def __init__(self, available: Union[ResourceVector, Iterable[int]]):
        if not isinstance(available, ResourceVector):
            available = ResourceVector(available, label="Available")
        self._available = available

    @property
    def available(self) -> ResourceVector:
        """Live availability vector (mutate only through grant/release)."""
        return self._available

    @property
    def num_resources(self) -> int:
        """Number of resource types in the pool."""
        return len(self._available)

    def grant(self, amounts: Union[ResourceVector, Iterable[int]]) -> None:
        """
        Remove resource instances from the pool.

        Args:
            amounts: Instances to take, by resource type

        Raises:
            ValueError: If amounts has the wrong length or any amount exceeds
                what is available. Callers are expected to run the safety
                check first.
        """
        amounts = list(amounts)
        if len(amounts) != self.num_resources:
            raise ValueError(
                f"Cannot grant {len(amounts)} resource types from a pool of {self.num_resources}"
            )
        for i, amount in enumerate(amounts):
            if amount > self._available[i]:
                raise ValueError(
                    f"R{i}: cannot grant {amount} - only {self._available[i]} available"
                )

        for i, amount in enumerate(amounts):
            self._available[i] -= amount

    def release(self, amounts: Union[ResourceVector, Iterable[int]]) -> None:
        """
        Return resource instances to the pool.

        Args:
            amounts: Instances to give back, by resource type
        """
        for i, amount in enumerate(amounts):
            self._available[i] += amount

    def snapshot(self) -> ResourceVector:
        """Copy of the current availability."""
        return self._available.copy()

    def __repr__(self) -> str:
        return f"ResourceState(available={self._available.to_list()})"
