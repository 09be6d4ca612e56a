"""Shared test fixtures"""
from __future__ import annotations

import asyncio

import pytest

from src.application.ports.gateways import (
    CreatedSnapshot,
    IComputeGateway,
    InstanceGroup,
)
from src.domain.snapshot import Instance, SnapshotRequest, Tag, VolumeMapping


class FakeComputeGateway(IComputeGateway):
    """
    In-memory Compute Gateway

    呼び出しを記録し、ボリュームIDごとに失敗を注入できる。
    """

    def __init__(
        self,
        groups: list[InstanceGroup] | None = None,
        list_error: Exception | None = None,
        snapshot_errors: dict[str, Exception] | None = None,
        delay: float = 0.0,
    ):
        self.groups = groups if groups is not None else []
        self.list_error = list_error
        self.snapshot_errors = snapshot_errors or {}
        self.delay = delay
        self.list_calls: list[tuple[str, str]] = []
        self.snapshot_requests: list[SnapshotRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def list_instances_by_tag(self, key: str, value: str) -> list[InstanceGroup] | None:
        self.list_calls.append((key, value))
        if self.list_error is not None:
            raise self.list_error
        return self.groups

    async def create_snapshot(self, request: SnapshotRequest) -> CreatedSnapshot:
        self.snapshot_requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            error = self.snapshot_errors.get(request.volume_id)
            if error is not None:
                raise error
            return CreatedSnapshot(snapshot_id=f"snap-{request.volume_id}", state="pending")
        finally:
            self.in_flight -= 1

    @property
    def call_count(self) -> int:
        return len(self.list_calls) + len(self.snapshot_requests)


def make_instance(
    instance_id: str = "i-0123456789",
    tags: list[tuple[str, str]] | None = None,
    volumes: list[tuple[str, str | None]] | None = None,
) -> Instance:
    """テスト用インスタンスを生成"""
    if volumes is None:
        volumes = [("/dev/xvda", "vol-root"), ("/dev/xvdb", "v-1")]
    return Instance(
        id=instance_id,
        tags=tuple(Tag(k, v) for k, v in (tags or [])),
        volume_mappings=tuple(VolumeMapping(d, v) for d, v in volumes),
    )


@pytest.fixture
def instance() -> Instance:
    """ルートボリュームとデータボリュームを1つずつ持つインスタンス"""
    return make_instance(tags=[("deploymentId", "d1"), ("maia-owner", "team-x"), ("env", "prod")])


@pytest.fixture
def fake_gateway(instance: Instance) -> FakeComputeGateway:
    return FakeComputeGateway(groups=[InstanceGroup(group_id="r-1", instances=[instance])])
