"""
checkout_config -- single public entrypoint for checkout configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``, and turns a configuration into a
    ``CheckoutReconciler`` through ``build_reconciler()``.

Invariants enforced:
    - The returned configuration names a known amount policy and only
      known, non-repeated address fields.
    - Deterministic: the same YAML always produces the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with the requested name.
    - ``ValueError`` -- unknown amount policy, unknown address field, or
      wrongly typed values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``CHECKOUT_CONFIG_TRACE`` log entry with config_id, version and
    checksum, tying reconciliation decisions to the configuration that
    governed them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from checkout_config.loader import load_config_file
from checkout_config.schema import (
    CheckoutConfig,
    ReconciliationSettings,
    RecordingSettings,
)
from checkout_engines.reconciliation.address_fields import fields_by_name
from checkout_engines.reconciliation.amount_policy import (
    AMOUNT_POLICY_NAMES,
    AmountPolicy,
    amount_policy_from_name,
)
from checkout_engines.reconciliation.reconciler import CheckoutReconciler

_logger = logging.getLogger("checkout_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def validate_config(config: CheckoutConfig) -> None:
    """Raise ValueError if the configuration cannot build a reconciler."""
    name = config.reconciliation.amount_policy
    if name not in AMOUNT_POLICY_NAMES:
        known = ", ".join(sorted(AMOUNT_POLICY_NAMES))
        raise ValueError(f"Unknown amount policy {name!r} (known: {known})")
    fields_by_name(config.reconciliation.address_fields)


def get_active_config(
    config_dir: Path | None = None,
    name: str = "default",
) -> CheckoutConfig:
    """Load and validate the named configuration set.

    Args:
        config_dir: Directory holding ``<name>.yaml``.  Defaults to the
            sets shipped with this package.
        name: Configuration set name.
    """
    path = (config_dir or _DEFAULT_CONFIG_DIR) / f"{name}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"No checkout configuration set at {path}")

    config = load_config_file(path)
    validate_config(config)

    _logger.info(
        "CHECKOUT_CONFIG_TRACE",
        extra={
            "trace_type": "CHECKOUT_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "amount_policy": config.reconciliation.amount_policy,
            "address_fields": list(config.reconciliation.address_fields),
            "recording_enabled": config.recording.enabled,
        },
    )
    return config


def build_reconciler(
    config: CheckoutConfig,
    processor_amount_rule: AmountPolicy | None = None,
) -> CheckoutReconciler:
    """Build a reconciler with the configured amount policy and field table.

    Args:
        config: Validated configuration.
        processor_amount_rule: The processor client's amount check, used
            when the configured policy is ``processor``.

    Raises:
        ValueError: the policy is ``processor`` and no rule was given.
    """
    return CheckoutReconciler(
        amount_policy=amount_policy_from_name(
            config.reconciliation.amount_policy, processor_amount_rule,
        ),
        address_fields=fields_by_name(config.reconciliation.address_fields),
    )


__all__ = [
    "CheckoutConfig",
    "ReconciliationSettings",
    "RecordingSettings",
    "build_reconciler",
    "get_active_config",
    "validate_config",
]
