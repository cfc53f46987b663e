"""
Checkout Kernel - express checkout reconciliation core.

Value objects, typed errors, structured logging and audit persistence
shared by the reconciliation engines and the payment service:
- Decimal-only money with ISO 4217 currencies
- Immutable basket and address snapshots
- Machine-readable error codes
- Optional audit trail of reconciliation decisions
"""

__version__ = "0.1.0"
