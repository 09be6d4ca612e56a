"""Snapshot Deployment Use Case"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from src.application.ports.gateways import IComputeGateway, ProviderError
from src.domain.snapshot import (
    Instance,
    OutcomeStatus,
    SkippedVolume,
    SnapshotOutcome,
    SnapshotRequest,
    SnapshotRunSummary,
)

logger = structlog.get_logger()

# インスタンス検索に使うタグキー
DEPLOYMENT_TAG_KEY = "deploymentId"


@dataclass
class SnapshotDeploymentInput:
    """スナップショット実行入力DTO"""

    deployment_id: str
    release_id: str | None = None


class SnapshotDeploymentUseCase:
    """
    デプロイメント単位のスナップショット ユースケース

    1. deploymentId タグでインスタンスを検索
    2. 各インスタンスのデータボリュームを列挙（ルートボリュームは除外）
    3. 全 (インスタンス, ボリューム) の組を1つの並行バッチとしてスナップショット作成
    4. 結果を集計してログ出力

    1つのボリュームの失敗が他の試行を中断することはない。
    """

    def __init__(
        self,
        compute_gateway: IComputeGateway,
        max_concurrency: int | None = None,
    ):
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be a positive integer")
        self._gateway = compute_gateway
        self._max_concurrency = max_concurrency

    async def execute(self, input_data: SnapshotDeploymentInput) -> SnapshotRunSummary:
        """ユースケースを実行"""
        log = logger.bind(
            deployment_id=input_data.deployment_id,
            release_id=input_data.release_id,
        )
        log.info("snapshot_run_started")

        summary = SnapshotRunSummary(
            deployment_id=input_data.deployment_id,
            release_id=input_data.release_id,
        )

        instances = await self.discover(input_data.deployment_id)
        summary.instance_ids = [instance.id for instance in instances]

        requests: list[SnapshotRequest] = []
        for instance in instances:
            requests.extend(self._plan(instance, input_data.release_id, summary.skipped))

        summary.outcomes = await self._run_batch(requests)

        log.info("snapshot_run_completed", **summary.to_dict())
        return summary

    async def discover(self, deployment_id: str) -> list[Instance]:
        """deploymentId タグに一致するインスタンスを検索"""
        log = logger.bind(deployment_id=deployment_id)

        try:
            groups = await self._gateway.list_instances_by_tag(
                DEPLOYMENT_TAG_KEY, deployment_id
            )
        except ProviderError as e:
            if not e.is_recoverable:
                raise
            log.error("instance_query_failed", error=str(e), error_kind=e.kind.value)
            return []

        if groups is None:
            log.warning("instance_groups_missing")
            groups = []

        instances = [instance for group in groups for instance in group.instances]
        for instance in instances:
            log.info("instance_found", instance_id=instance.id)

        if not instances:
            log.info("no_instances_found")

        return instances

    async def snapshot_instance(
        self,
        instance: Instance,
        release_id: str | None = None,
    ) -> list[SnapshotOutcome]:
        """1インスタンスの全データボリュームをスナップショット

        単一インスタンス用の入口。execute は全インスタンスのボリュームを
        1つのバッチにまとめるため、このメソッドを経由しない。
        """
        requests = self._plan(instance, release_id, [])
        return await self._run_batch(requests)

    def _plan(
        self,
        instance: Instance,
        release_id: str | None,
        skipped: list[SkippedVolume],
    ) -> list[SnapshotRequest]:
        """対象ボリュームごとにリクエストを組み立て、対象外のものは skipped に記録"""
        requests = []
        for mapping in instance.volume_mappings:
            reason = mapping.skip_reason
            if reason is not None:
                logger.info(
                    "volume_skipped",
                    instance_id=instance.id,
                    device_name=mapping.device_name,
                    reason=reason.value,
                )
                skipped.append(SkippedVolume(instance.id, mapping.device_name, reason))
                continue

            logger.info(
                "creating_snapshot",
                instance_id=instance.id,
                volume_id=mapping.volume_id,
                device_name=mapping.device_name,
            )
            requests.append(SnapshotRequest.for_volume(instance, mapping, release_id))
        return requests

    async def _run_batch(self, requests: list[SnapshotRequest]) -> list[SnapshotOutcome]:
        """リクエストを並行実行し、全試行の完了を待ってから結果を返す

        回復不能なエラーがあった場合は、全試行の完了後に最初のものを送出する。
        """
        if not requests:
            return []

        semaphore = (
            asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
        )
        results = await asyncio.gather(
            *(self._guarded(request, semaphore) for request in requests),
            return_exceptions=True,
        )

        outcomes: list[SnapshotOutcome] = []
        unrecovered: list[Exception] = []
        for request, result in zip(requests, results):
            if isinstance(result, SnapshotOutcome):
                outcomes.append(result)
            elif isinstance(result, Exception):
                logger.error(
                    "snapshot_attempt_aborted",
                    instance_id=request.instance_id,
                    volume_id=request.volume_id,
                    error=str(result),
                    exc_info=result,
                )
                unrecovered.append(result)
            else:
                # CancelledError など
                raise result

        if unrecovered:
            raise unrecovered[0]
        return outcomes

    async def _guarded(
        self,
        request: SnapshotRequest,
        semaphore: asyncio.Semaphore | None,
    ) -> SnapshotOutcome:
        if semaphore is None:
            return await self._attempt(request)
        async with semaphore:
            return await self._attempt(request)

    async def _attempt(self, request: SnapshotRequest) -> SnapshotOutcome:
        """1ボリュームのスナップショットを作成"""
        log = logger.bind(
            instance_id=request.instance_id,
            volume_id=request.volume_id,
            device_name=request.device_name,
        )

        try:
            created = await self._gateway.create_snapshot(request)
        except ProviderError as e:
            if not e.is_recoverable:
                raise
            log.error("snapshot_failed", error=str(e), error_kind=e.kind.value)
            return SnapshotOutcome(
                instance_id=request.instance_id,
                device_name=request.device_name,
                volume_id=request.volume_id,
                status=OutcomeStatus.FAILED,
                error_kind=e.kind.value,
                error=str(e),
            )

        log.info("snapshot_created", snapshot_id=created.snapshot_id, state=created.state)
        return SnapshotOutcome(
            instance_id=request.instance_id,
            device_name=request.device_name,
            volume_id=request.volume_id,
            status=OutcomeStatus.CREATED,
            snapshot_id=created.snapshot_id,
            state=created.state,
        )
