# market_data/__init__.py
from .adapters import adapt, from_ccxt_row, from_fcs_row, from_fmp_row, from_mapping, to_epoch_seconds
from .normalizer import DEFAULT_FRESHNESS, FreshnessPolicy, assess_freshness, normalize

__all__ = [
    "adapt",
    "from_ccxt_row",
    "from_fcs_row",
    "from_fmp_row",
    "from_mapping",
    "to_epoch_seconds",
    "DEFAULT_FRESHNESS",
    "FreshnessPolicy",
    "assess_freshness",
    "normalize",
]
