"""
Configuration Loader (``checkout_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into typed
``checkout_config.schema`` dataclasses.  Runtime callers use
``checkout_config.get_active_config()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Wrong value types  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from checkout_engines.reconciliation.amount_policy import PROCESSOR_AMOUNT_POLICY

from checkout_config.schema import (
    DEFAULT_ADDRESS_FIELDS,
    CheckoutConfig,
    ReconciliationSettings,
    RecordingSettings,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file and return its contents as a dict."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML value must be a mapping")
    return data


def parse_reconciliation(data: dict[str, Any]) -> ReconciliationSettings:
    amount_policy = data.get("amount_policy", PROCESSOR_AMOUNT_POLICY)
    if not isinstance(amount_policy, str):
        raise ValueError(f"amount_policy must be a string, got {amount_policy!r}")

    fields_raw = data.get("address_fields", list(DEFAULT_ADDRESS_FIELDS))
    if not isinstance(fields_raw, list) or not all(isinstance(f, str) for f in fields_raw):
        raise ValueError(f"address_fields must be a list of strings, got {fields_raw!r}")

    return ReconciliationSettings(
        amount_policy=amount_policy,
        address_fields=tuple(fields_raw),
    )


def parse_recording(data: dict[str, Any]) -> RecordingSettings:
    enabled = data.get("enabled", False)
    if not isinstance(enabled, bool):
        raise ValueError(f"recording.enabled must be a boolean, got {enabled!r}")
    return RecordingSettings(enabled=enabled)


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the parsed YAML content."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_config(data: dict[str, Any]) -> CheckoutConfig:
    """Parse a ``CheckoutConfig`` from a dict.

    Raises:
        KeyError: if ``config_id`` or ``version`` is missing.
        ValueError: if a value has the wrong type.
    """
    version = data["version"]
    if not isinstance(version, int) or isinstance(version, bool):
        raise ValueError(f"version must be an integer, got {version!r}")

    return CheckoutConfig(
        config_id=str(data["config_id"]),
        version=version,
        reconciliation=parse_reconciliation(data.get("reconciliation") or {}),
        recording=parse_recording(data.get("recording") or {}),
        checksum=compute_checksum(data),
    )


def load_config_file(path: Path) -> CheckoutConfig:
    return parse_config(load_yaml_file(path))
