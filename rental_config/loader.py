"""
Configuration Loader (``rental_config.loader``).

Responsibility
--------------
Loads a billing configuration YAML file and parses it into a typed
``rental_config.schema.BillingConfig``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Consumed by whoever
constructs ``LeaseBillingService``.  Engines never read configuration.

Invariants enforced
-------------------
* Unknown keys and invalid values raise ``InvalidConfigError``; no silent
  defaults for misspelled settings.
* Monetary settings must be integers or numeric strings, never floats.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad key or value  -> ``InvalidConfigError``.

Example document::

    billing:
      rounding_step: 1000
      electric_rate: 3500
      water_rate: 20000
      wifi_fee: 100000
      trash_fee: 30000
      prorate_first_month: true
      remainder_policy: first_listed
      reject_inverted_periods: false
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from rental_config.schema import BillingConfig
from rental_engines.apportionment import RemainderPolicy
from rental_kernel.domain.values import Money
from rental_kernel.exceptions import InvalidConfigError
from rental_kernel.logging_config import get_logger

logger = get_logger("config.loader")

_MONEY_KEYS = frozenset({
    "rounding_step",
    "electric_rate",
    "water_rate",
    "wifi_fee",
    "trash_fee",
})
_BOOL_KEYS = frozenset({"prorate_first_month", "reject_inverted_periods"})
_KNOWN_KEYS = _MONEY_KEYS | _BOOL_KEYS | {"remainder_policy"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_money(key: str, value: Any) -> Money:
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidConfigError(key, f"expected an integer amount, got {value!r}")
    try:
        return Money.of(Decimal(str(value)))
    except (InvalidOperation, ValueError) as e:
        raise InvalidConfigError(key, f"not a number: {value!r}") from e


def parse_billing_config(data: dict[str, Any]) -> BillingConfig:
    """
    Parse a ``BillingConfig`` from a dict.

    Accepts either a flat mapping of settings or one nested under a
    ``billing`` key. Settings that are absent keep their defaults.

    Raises:
        InvalidConfigError: on unknown keys or invalid values.
    """
    section = data.get("billing", data) if isinstance(data, dict) else data
    if not isinstance(section, dict):
        raise InvalidConfigError("billing", "expected a mapping")

    unknown = sorted(set(section) - _KNOWN_KEYS)
    if unknown:
        raise InvalidConfigError(unknown[0], "unknown setting")

    kwargs: dict[str, Any] = {}
    for key, value in section.items():
        if key in _MONEY_KEYS:
            kwargs[key] = parse_money(key, value)
        elif key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise InvalidConfigError(key, f"expected true or false, got {value!r}")
            kwargs[key] = value
        elif key == "remainder_policy":
            try:
                kwargs[key] = RemainderPolicy(value)
            except ValueError as e:
                allowed = ", ".join(p.value for p in RemainderPolicy)
                raise InvalidConfigError(key, f"expected one of {allowed}") from e

    try:
        return BillingConfig(**kwargs)
    except ValueError as e:
        raise InvalidConfigError("billing", str(e)) from e


def load_billing_config(path: Path) -> BillingConfig:
    """Load and parse a billing configuration file."""
    config = parse_billing_config(load_yaml_file(path))
    logger.info("billing_config_loaded", extra={
        "path": str(path),
        "checksum": compute_checksum(config),
    })
    return config


def compute_checksum(config: BillingConfig) -> str:
    """
    Compute SHA-256 checksum of the canonical JSON serialization.

    Identical configurations always produce identical checksums.
    """
    canonical = json.dumps(config.to_dict(), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
