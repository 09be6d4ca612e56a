"""Snapshot Use Cases"""
from .snapshot_deployment import (
    DEPLOYMENT_TAG_KEY,
    SnapshotDeploymentInput,
    SnapshotDeploymentUseCase,
)

__all__ = [
    "DEPLOYMENT_TAG_KEY",
    "SnapshotDeploymentInput",
    "SnapshotDeploymentUseCase",
]
