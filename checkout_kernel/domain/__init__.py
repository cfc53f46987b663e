"""
Pure domain layer.

Value objects and the clock abstraction, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from checkout_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from checkout_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from checkout_kernel.domain.values import Currency, Money, PostalAddress

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
    "PostalAddress",
]
