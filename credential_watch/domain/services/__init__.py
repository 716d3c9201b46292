"""Domain services - Stateless operations on domain objects."""

from .reconciler import reconcile
from .threshold_filter import filter_by_thresholds

__all__ = ["filter_by_thresholds", "reconcile"]
