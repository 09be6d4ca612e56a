"""Snapshot Value Objects"""
from .snapshot_outcome import (
    OutcomeStatus,
    SkippedVolume,
    SnapshotOutcome,
    SnapshotRunSummary,
)
from .snapshot_request import SnapshotRequest
from .tag import Tag
from .volume_mapping import ROOT_DEVICE_NAME, SkipReason, VolumeMapping

__all__ = [
    "OutcomeStatus",
    "ROOT_DEVICE_NAME",
    "SkipReason",
    "SkippedVolume",
    "SnapshotOutcome",
    "SnapshotRequest",
    "SnapshotRunSummary",
    "Tag",
    "VolumeMapping",
]
