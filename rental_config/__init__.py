"""
rental_config -- billing configuration.

Responsibility:
    Typed ``BillingConfig`` schema plus a YAML loader for it.

Architecture position:
    Configuration -- sits above ``rental_engines`` and below
    ``rental_modules``.  Engines MUST NEVER import from ``rental_config``;
    services translate configuration into explicit engine arguments.
"""

from rental_config.loader import (
    compute_checksum,
    load_billing_config,
    load_yaml_file,
    parse_billing_config,
)
from rental_config.schema import BillingConfig

__all__ = [
    "BillingConfig",
    "compute_checksum",
    "load_billing_config",
    "load_yaml_file",
    "parse_billing_config",
]
