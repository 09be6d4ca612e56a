"""Instance Entity"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..value_objects.tag import Tag
from ..value_objects.volume_mapping import VolumeMapping


@dataclass(frozen=True)
class Instance:
    """
    EC2 インスタンス（エンティティ）

    プロバイダが所有するデータの読み取り専用ビュー。
    1回の呼び出しの間だけ存在する。
    """

    id: str
    tags: tuple[Tag, ...] = field(default_factory=tuple)
    volume_mappings: tuple[VolumeMapping, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Instance id must not be empty")

    def inherited_tags(self) -> tuple[Tag, ...]:
        """スナップショットへ継承するタグ（元の順序を保持）"""
        return tuple(tag for tag in self.tags if tag.is_inherited)

    def eligible_volumes(self) -> tuple[VolumeMapping, ...]:
        return tuple(m for m in self.volume_mappings if m.is_eligible)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Instance:
        """describe_instances のレスポンス要素から生成"""
        return cls(
            id=data.get("InstanceId", ""),
            tags=tuple(Tag.from_dict(t) for t in data.get("Tags") or []),
            volume_mappings=tuple(
                VolumeMapping.from_dict(m) for m in data.get("BlockDeviceMappings") or []
            ),
        )
