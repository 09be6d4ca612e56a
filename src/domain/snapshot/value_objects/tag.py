"""Tag Value Object"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# インスタンスからスナップショットへ継承されるタグキーの接頭辞
INHERITED_TAG_PREFIX = "maia"


@dataclass(frozen=True)
class Tag:
    """
    リソースタグ（値オブジェクト）

    EC2 の Key/Value ペアを表現する。キー・値ともに加工せず保持する。
    """

    key: str
    value: str

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("Tag key must not be empty")

    @property
    def is_inherited(self) -> bool:
        """スナップショットへコピーされるタグかどうか"""
        return self.key.startswith(INHERITED_TAG_PREFIX)

    def to_dict(self) -> dict[str, str]:
        """EC2 API 形式に変換"""
        return {"Key": self.key, "Value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        """EC2 API 形式から生成"""
        return cls(key=data["Key"], value=data.get("Value", ""))
