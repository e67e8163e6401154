"""
Timeline package.

Public API:
- Output models: StopManifestEntry, StopRole, NextLeg, TimelineSummary
- Reconciler entry: reconcile, summarize
"""
from .models import NextLeg, StopManifestEntry, StopRole, TimelineSummary
from .reconciler import reconcile, summarize

__all__ = [
    "NextLeg",
    "StopManifestEntry",
    "StopRole",
    "TimelineSummary",
    "reconcile",
    "summarize",
]
