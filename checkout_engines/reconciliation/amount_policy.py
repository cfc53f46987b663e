"""
Amount policies -- how a basket total is compared with the approved amount.

Whether the two must be exactly equal or may differ slightly is a processor
rule, not a reconciler rule.  A policy is any callable
``(local, approved) -> bool``; the processor client's
``validate_approved_amount`` satisfies the protocol directly.

Configuration names:
    processor  The processor client's own ``validate_approved_amount``.
               Default; only available where a client is wired in.
    exact      Both sides rounded to the currency's minor unit, then compared
               for equality.
    tolerance  Both sides rounded, then accepted if they differ by at most
               one minor unit.

Both local policies refuse a missing local amount and mixed currencies.
"""

from __future__ import annotations

from typing import Protocol

from checkout_kernel.domain.values import Money


class AmountPolicy(Protocol):
    def __call__(self, local: Money | None, approved: Money) -> bool: ...


class ExactMinorUnitAmountPolicy:
    """Exact decimal equality at minor-unit precision."""

    name = "exact"

    def __call__(self, local: Money | None, approved: Money) -> bool:
        if local is None or not local.same_currency(approved):
            return False
        return local.round().amount == approved.round().amount

    def __repr__(self) -> str:
        return "ExactMinorUnitAmountPolicy()"


class MinorUnitToleranceAmountPolicy:
    """Equality within one minor unit of the approved currency."""

    name = "tolerance"

    def __call__(self, local: Money | None, approved: Money) -> bool:
        if local is None or not local.same_currency(approved):
            return False
        difference = local.round().amount - approved.round().amount
        return abs(difference) <= approved.currency.minor_unit

    def __repr__(self) -> str:
        return "MinorUnitToleranceAmountPolicy()"


AMOUNT_POLICIES: dict[str, type] = {
    ExactMinorUnitAmountPolicy.name: ExactMinorUnitAmountPolicy,
    MinorUnitToleranceAmountPolicy.name: MinorUnitToleranceAmountPolicy,
}


PROCESSOR_AMOUNT_POLICY = "processor"

AMOUNT_POLICY_NAMES: frozenset[str] = frozenset(AMOUNT_POLICIES) | {PROCESSOR_AMOUNT_POLICY}


def amount_policy_from_name(
    name: str,
    processor_rule: AmountPolicy | None = None,
) -> AmountPolicy:
    """Resolve a configuration name to a policy.

    ``processor`` resolves to ``processor_rule``, the processor client's
    amount check; the other names instantiate a local policy.

    Raises:
        ValueError: if the name is unknown, or is ``processor`` and no
            processor rule was given.
    """
    if name == PROCESSOR_AMOUNT_POLICY:
        if processor_rule is None:
            raise ValueError(
                "Amount policy 'processor' needs the processor client's amount rule"
            )
        return processor_rule
    try:
        return AMOUNT_POLICIES[name]()
    except KeyError:
        known = ", ".join(sorted(AMOUNT_POLICY_NAMES))
        raise ValueError(f"Unknown amount policy {name!r} (known: {known})") from None
