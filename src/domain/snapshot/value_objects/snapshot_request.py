"""Snapshot Request Value Object"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .tag import Tag
from .volume_mapping import VolumeMapping

if TYPE_CHECKING:
    from ..entities.instance import Instance

CREATED_BY_TAG_KEY = "created-by"
CREATED_BY_TAG_VALUE = "deploymentsnapshot Lambda function"
NAME_TAG_KEY = "Name"


def build_description(instance_id: str, device_name: str, release_id: str | None) -> str:
    """スナップショットの説明文を生成"""
    if release_id:
        return (
            f"Automatic pre-release snapshot for {release_id}. "
            f"Created from {device_name} on {instance_id}."
        )
    return f"Snapshot triggered by API. Created from {device_name} on {instance_id}."


def build_name(instance_id: str, release_id: str | None) -> str:
    """Name タグの値を生成"""
    if release_id:
        return f"Pre-release snapshot for {release_id}"
    return f"API-triggered snapshot for {instance_id}"


@dataclass(frozen=True)
class SnapshotRequest:
    """
    スナップショット作成リクエスト（値オブジェクト）

    対象ボリューム1つにつき1つ生成され、プロバイダに渡した後は破棄される。
    タグは Name, created-by, 継承タグ（maia*）の順に並ぶ。
    """

    instance_id: str
    device_name: str
    volume_id: str
    description: str
    tags: tuple[Tag, ...]

    def __post_init__(self) -> None:
        if not self.volume_id:
            raise ValueError("Volume id must not be empty")
        keys = [tag.key for tag in self.tags]
        if len(keys) != len(set(keys)):
            raise ValueError(f"Duplicate tag keys in snapshot request: {keys}")

    @classmethod
    def for_volume(
        cls,
        instance: Instance,
        mapping: VolumeMapping,
        release_id: str | None = None,
    ) -> SnapshotRequest:
        """インスタンスとボリュームからリクエストを組み立てる"""
        if not mapping.is_eligible:
            raise ValueError(
                f"{mapping.device_name} on {instance.id} is not eligible "
                f"for snapshot: {mapping.skip_reason.value}"
            )

        tags = (
            Tag(NAME_TAG_KEY, build_name(instance.id, release_id)),
            Tag(CREATED_BY_TAG_KEY, CREATED_BY_TAG_VALUE),
        ) + instance.inherited_tags()

        return cls(
            instance_id=instance.id,
            device_name=mapping.device_name,
            volume_id=mapping.volume_id,
            description=build_description(instance.id, mapping.device_name, release_id),
            tags=tags,
        )

    def tag_specifications(self) -> list[dict[str, Any]]:
        """EC2 TagSpecifications 形式に変換"""
        return [
            {
                "ResourceType": "snapshot",
                "Tags": [tag.to_dict() for tag in self.tags],
            }
        ]
