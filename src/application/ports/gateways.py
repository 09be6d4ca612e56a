"""Gateway Interfaces (Ports)"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from src.domain.snapshot import Instance, SnapshotRequest


class ProviderErrorKind(str, Enum):
    """プロバイダエラーの分類"""

    # スロットリング、5xx、接続失敗など一時的な障害
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    # 不正なパラメータ、権限不足、存在しないボリュームなど
    VALIDATION = "validation"
    UNEXPECTED = "unexpected"


# 呼び出し単位でログ出力のみ行い、処理を継続してよい分類
RECOVERABLE_ERROR_KINDS = frozenset(
    {ProviderErrorKind.PROVIDER_UNAVAILABLE, ProviderErrorKind.VALIDATION}
)


class ProviderError(Exception):
    """
    プロバイダアダプタが送出する型付きエラー

    SDK 固有の例外は必ずこの型に変換してからアプリケーション層へ渡す。
    """

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        code: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.code = code

    @property
    def is_recoverable(self) -> bool:
        return self.kind in RECOVERABLE_ERROR_KINDS

    def __str__(self) -> str:
        message = super().__str__()
        if self.code:
            return f"[{self.kind.value}:{self.code}] {message}"
        return f"[{self.kind.value}] {message}"


@dataclass
class InstanceGroup:
    """インスタンスのグループ（EC2 の Reservation に相当）"""

    group_id: str | None = None
    instances: list[Instance] = field(default_factory=list)


@dataclass
class CreatedSnapshot:
    """スナップショット作成結果DTO"""

    snapshot_id: str
    state: str


class IComputeGateway(ABC):
    """
    Compute/Storage Gateway Interface

    インスタンス・ボリュームのメタデータ参照とスナップショット作成を抽象化する。
    失敗時は ProviderError を送出する。
    """

    @abstractmethod
    async def list_instances_by_tag(
        self,
        key: str,
        value: str,
    ) -> list[InstanceGroup] | None:
        """タグの完全一致でインスタンスを検索

        Returns:
            グループ化されたインスタンス。結果コレクション自体が
            返されなかった場合は None
        """
        pass

    @abstractmethod
    async def create_snapshot(self, request: SnapshotRequest) -> CreatedSnapshot:
        """ボリュームのスナップショットを作成"""
        pass
