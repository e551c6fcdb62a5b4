"""
Pure domain layer.

This module contains pure value objects with NO dependencies on:
- Persistence
- Time/clock (except the injectable Clock abstraction)
- I/O

All domain objects are immutable and deterministic.
"""

from rental_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from rental_kernel.domain.values import VND, Money, Period, Quantity

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Money",
    "Period",
    "Quantity",
    "VND",
]
