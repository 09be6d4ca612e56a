"""Snapshot Outcome Value Objects"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .volume_mapping import SkipReason


class OutcomeStatus(str, Enum):
    """1ボリュームに対するスナップショット試行の結果"""

    CREATED = "created"
    FAILED = "failed"


@dataclass(frozen=True)
class SnapshotOutcome:
    """(インスタンス, ボリューム) ごとの試行結果"""

    instance_id: str
    device_name: str
    volume_id: str
    status: OutcomeStatus
    snapshot_id: str | None = None
    state: str | None = None
    error_kind: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.CREATED

    def to_dict(self) -> dict[str, Any]:
        data = {
            "instance_id": self.instance_id,
            "device_name": self.device_name,
            "volume_id": self.volume_id,
            "status": self.status.value,
        }
        if self.succeeded:
            data.update(snapshot_id=self.snapshot_id, state=self.state)
        else:
            data.update(error_kind=self.error_kind, error=self.error)
        return data


@dataclass(frozen=True)
class SkippedVolume:
    """スナップショット対象外として除外されたデバイス"""

    instance_id: str
    device_name: str
    reason: SkipReason


@dataclass
class SnapshotRunSummary:
    """
    1回の呼び出し全体の集計

    呼び出し元へのレスポンスには含めず、ログにのみ出力する。
    """

    deployment_id: str
    release_id: str | None = None
    instance_ids: list[str] = field(default_factory=list)
    outcomes: list[SnapshotOutcome] = field(default_factory=list)
    skipped: list[SkippedVolume] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)

    @property
    def has_failures(self) -> bool:
        return self.failed_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "deployment_id": self.deployment_id,
            "release_id": self.release_id,
            "instances": len(self.instance_ids),
            "created": self.created_count,
            "failed": self.failed_count,
            "skipped": len(self.skipped),
        }
