"""Volume Mapping Value Object"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# ルートボリュームのデバイス名。このデバイスは常にスナップショット対象外
ROOT_DEVICE_NAME = "/dev/xvda"


class SkipReason(str, Enum):
    """スナップショット対象外となる理由"""

    ROOT_VOLUME = "root_volume"
    NO_VOLUME = "no_volume"


@dataclass(frozen=True)
class VolumeMapping:
    """
    ブロックデバイスマッピング（値オブジェクト）

    インスタンスにアタッチされたデバイスと EBS ボリュームの対応。
    EBS 以外のデバイスは volume_id を持たない。
    """

    device_name: str
    volume_id: str | None = None

    def __post_init__(self) -> None:
        if not self.device_name:
            raise ValueError("Device name must not be empty")

    @property
    def is_root(self) -> bool:
        return self.device_name == ROOT_DEVICE_NAME

    @property
    def skip_reason(self) -> SkipReason | None:
        """対象外なら理由を返す。対象なら None"""
        if self.is_root:
            return SkipReason.ROOT_VOLUME
        if not self.volume_id:
            return SkipReason.NO_VOLUME
        return None

    @property
    def is_eligible(self) -> bool:
        return self.skip_reason is None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VolumeMapping:
        """EC2 BlockDeviceMappings の要素から生成"""
        ebs = data.get("Ebs") or {}
        return cls(
            device_name=data.get("DeviceName", ""),
            volume_id=ebs.get("VolumeId"),
        )
