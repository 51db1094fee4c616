"""Static-analysis checks shipped with layoutlint."""

from layoutlint.checks.module_layout import (
    DEFAULT_ORDER,
    EXTENDED_ORDER,
    PRESETS,
    CategoryOrder,
    ModuleLayoutCheck,
    placement_message,
    validate_order,
)

__all__ = [
    "DEFAULT_ORDER",
    "EXTENDED_ORDER",
    "PRESETS",
    "CategoryOrder",
    "ModuleLayoutCheck",
    "placement_message",
    "validate_order",
]
