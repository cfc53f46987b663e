"""Kernel services -- imperative shell over the kernel models."""

from checkout_kernel.services.outcome_recorder import ReconciliationOutcomeRecorder

__all__ = ["ReconciliationOutcomeRecorder"]
