"""EC2 Gateway Implementation"""
from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Callable

import boto3
import structlog
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from src.application.ports.gateways import (
    CreatedSnapshot,
    IComputeGateway,
    InstanceGroup,
    ProviderError,
    ProviderErrorKind,
)
from src.domain.snapshot import Instance, SnapshotRequest

logger = structlog.get_logger()

# 一時的な障害として扱う EC2 エラーコード
UNAVAILABLE_ERROR_CODES = frozenset(
    {
        "RequestLimitExceeded",
        "Throttling",
        "ThrottlingException",
        "ServiceUnavailable",
        "Unavailable",
        "InternalError",
        "InternalFailure",
        "SnapshotCreationPerVolumeRateExceeded",
    }
)

UNAVAILABLE_BOTOCORE_ERRORS = (
    BotoConnectionError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)


def classify_error(error: Exception, operation: str) -> ProviderError:
    """SDK の例外を ProviderError に変換"""
    if isinstance(error, ClientError):
        err = error.response.get("Error", {})
        code = err.get("Code", "Unknown")
        message = err.get("Message") or str(error)
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)

        if code in UNAVAILABLE_ERROR_CODES or status >= 500:
            kind = ProviderErrorKind.PROVIDER_UNAVAILABLE
        elif 400 <= status < 500:
            kind = ProviderErrorKind.VALIDATION
        else:
            kind = ProviderErrorKind.UNEXPECTED
        return ProviderError(kind, f"{operation}: {message}", code=code)

    if isinstance(error, UNAVAILABLE_BOTOCORE_ERRORS):
        return ProviderError(
            ProviderErrorKind.PROVIDER_UNAVAILABLE,
            f"{operation}: {error}",
            code=type(error).__name__,
        )

    return ProviderError(
        ProviderErrorKind.UNEXPECTED,
        f"{operation}: {error}",
        code=type(error).__name__,
    )


class EC2Gateway(IComputeGateway):
    """
    EC2 Gateway

    Amazon EC2 を使用したインスタンス検索と EBS スナップショット作成。
    boto3 の同期呼び出しはスレッドプールで実行し、イベントループを止めない。
    """

    def __init__(
        self,
        region: str | None = None,
        client: Any = None,
    ):
        self.region = region
        self._client = client or boto3.client("ec2", region_name=region)

    async def _call(self, operation: str, func: Callable[..., Any], **kwargs: Any) -> Any:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(func, **kwargs))
        except (ClientError, BotoCoreError) as e:
            raise classify_error(e, operation) from e

    async def list_instances_by_tag(
        self,
        key: str,
        value: str,
    ) -> list[InstanceGroup] | None:
        """
        タグの完全一致でインスタンスを検索

        Args:
            key: タグキー
            value: タグ値

        Returns:
            list[InstanceGroup] | None: Reservation ごとのインスタンス。
            どのページにも Reservations が含まれない場合は None
        """
        log = logger.bind(tag_key=key, tag_value=value)
        log.info("describe_instances_started")

        pages = await self._call(
            "DescribeInstances",
            self._describe_all_pages,
            filters=[{"Name": f"tag:{key}", "Values": [value]}],
        )

        groups: list[InstanceGroup] | None = None
        for page in pages:
            reservations = page.get("Reservations")
            if reservations is None:
                continue
            if groups is None:
                groups = []
            for reservation in reservations:
                groups.append(
                    InstanceGroup(
                        group_id=reservation.get("ReservationId"),
                        instances=[
                            Instance.from_dict(raw)
                            for raw in reservation.get("Instances") or []
                        ],
                    )
                )

        log.info(
            "describe_instances_completed",
            groups=None if groups is None else len(groups),
        )
        return groups

    def _describe_all_pages(self, filters: list[dict[str, Any]]) -> list[dict[str, Any]]:
        paginator = self._client.get_paginator("describe_instances")
        return list(paginator.paginate(Filters=filters))

    async def create_snapshot(self, request: SnapshotRequest) -> CreatedSnapshot:
        """
        EBS スナップショットを作成

        Args:
            request: スナップショット作成リクエスト

        Returns:
            CreatedSnapshot: スナップショットIDと状態
        """
        response = await self._call(
            "CreateSnapshot",
            self._client.create_snapshot,
            VolumeId=request.volume_id,
            Description=request.description,
            TagSpecifications=request.tag_specifications(),
        )

        return CreatedSnapshot(
            snapshot_id=response["SnapshotId"],
            state=response.get("State", "pending"),
        )
