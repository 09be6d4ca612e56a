"""Snapshot Domain Module"""
from .entities.instance import Instance
from .value_objects.snapshot_outcome import (
    OutcomeStatus,
    SkippedVolume,
    SnapshotOutcome,
    SnapshotRunSummary,
)
from .value_objects.snapshot_request import (
    CREATED_BY_TAG_KEY,
    CREATED_BY_TAG_VALUE,
    NAME_TAG_KEY,
    SnapshotRequest,
)
from .value_objects.tag import INHERITED_TAG_PREFIX, Tag
from .value_objects.volume_mapping import ROOT_DEVICE_NAME, SkipReason, VolumeMapping

__all__ = [
    "CREATED_BY_TAG_KEY",
    "CREATED_BY_TAG_VALUE",
    "INHERITED_TAG_PREFIX",
    "Instance",
    "NAME_TAG_KEY",
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
