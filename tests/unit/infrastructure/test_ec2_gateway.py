"""EC2Gateway Unit Tests"""
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError

from src.application.ports.gateways import ProviderError, ProviderErrorKind
from src.domain.snapshot import Instance, SnapshotRequest, Tag, VolumeMapping
from src.infrastructure.gateways.ec2 import EC2Gateway, classify_error


def client_error(code: str, status: int, operation: str = "CreateSnapshot") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} happened"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


def mock_client(pages: list[dict]) -> MagicMock:
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = iter(pages)
    return client


@pytest.fixture
def request_for_v1() -> SnapshotRequest:
    instance = Instance(
        id="i-1",
        tags=(Tag("maia-owner", "team-x"),),
        volume_mappings=(VolumeMapping("/dev/xvdb", "v-1"),),
    )
    return SnapshotRequest.for_volume(instance, instance.volume_mappings[0], "r7")


class TestListInstancesByTag:
    """インスタンス検索のテスト"""

    @pytest.mark.asyncio
    async def test_uses_tag_filter(self):
        """正常: tag:<key> フィルタで全ページを取得する"""
        client = mock_client([{"Reservations": []}])
        gateway = EC2Gateway(client=client)

        await gateway.list_instances_by_tag("deploymentId", "d1")

        client.get_paginator.assert_called_once_with("describe_instances")
        client.get_paginator.return_value.paginate.assert_called_once_with(
            Filters=[{"Name": "tag:deploymentId", "Values": ["d1"]}]
        )

    @pytest.mark.asyncio
    async def test_groups_reservations_across_pages(self):
        """正常: Reservation ごとにグループ化する"""
        client = mock_client(
            [
                {
                    "Reservations": [
                        {
                            "ReservationId": "r-1",
                            "Instances": [
                                {
                                    "InstanceId": "i-1",
                                    "Tags": [{"Key": "maia-owner", "Value": "team-x"}],
                                    "BlockDeviceMappings": [
                                        {"DeviceName": "/dev/xvda", "Ebs": {"VolumeId": "vol-root"}},
                                        {"DeviceName": "/dev/xvdb", "Ebs": {"VolumeId": "v-1"}},
                                    ],
                                }
                            ],
                        }
                    ]
                },
                {"Reservations": [{"ReservationId": "r-2", "Instances": [{"InstanceId": "i-2"}]}]},
            ]
        )

        groups = await EC2Gateway(client=client).list_instances_by_tag("deploymentId", "d1")

        assert [g.group_id for g in groups] == ["r-1", "r-2"]
        first = groups[0].instances[0]
        assert first.id == "i-1"
        assert [m.volume_id for m in first.eligible_volumes()] == ["v-1"]
        assert groups[1].instances[0].tags == ()

    @pytest.mark.asyncio
    async def test_missing_reservations_returns_none(self):
        """正常: Reservations がないレスポンスは None"""
        client = mock_client([{"ResponseMetadata": {}}])

        groups = await EC2Gateway(client=client).list_instances_by_tag("deploymentId", "d1")

        assert groups is None

    @pytest.mark.asyncio
    async def test_client_error_is_translated(self):
        """異常: ClientError は ProviderError に変換される"""
        client = MagicMock()
        client.get_paginator.return_value.paginate.side_effect = client_error(
            "UnauthorizedOperation", 403, "DescribeInstances"
        )

        with pytest.raises(ProviderError) as exc_info:
            await EC2Gateway(client=client).list_instances_by_tag("deploymentId", "d1")

        assert exc_info.value.kind == ProviderErrorKind.VALIDATION
        assert exc_info.value.code == "UnauthorizedOperation"
        assert isinstance(exc_info.value.__cause__, ClientError)


class TestCreateSnapshot:
    """スナップショット作成のテスト"""

    @pytest.mark.asyncio
    async def test_create_snapshot(self, request_for_v1: SnapshotRequest):
        """正常: VolumeId・説明・タグを渡してスナップショットを作成"""
        client = MagicMock()
        client.create_snapshot.return_value = {"SnapshotId": "snap-1", "State": "pending"}

        created = await EC2Gateway(client=client).create_snapshot(request_for_v1)

        assert created.snapshot_id == "snap-1"
        assert created.state == "pending"
        client.create_snapshot.assert_called_once_with(
            VolumeId="v-1",
            Description=(
                "Automatic pre-release snapshot for r7. Created from /dev/xvdb on i-1."
            ),
            TagSpecifications=[
                {
                    "ResourceType": "snapshot",
                    "Tags": [
                        {"Key": "Name", "Value": "Pre-release snapshot for r7"},
                        {"Key": "created-by", "Value": "deploymentsnapshot Lambda function"},
                        {"Key": "maia-owner", "Value": "team-x"},
                    ],
                }
            ],
        )

    @pytest.mark.asyncio
    async def test_throttling_is_unavailable(self, request_for_v1: SnapshotRequest):
        """異常: スロットリングは一時的な障害"""
        client = MagicMock()
        client.create_snapshot.side_effect = client_error("RequestLimitExceeded", 503)

        with pytest.raises(ProviderError) as exc_info:
            await EC2Gateway(client=client).create_snapshot(request_for_v1)

        assert exc_info.value.kind == ProviderErrorKind.PROVIDER_UNAVAILABLE
        assert exc_info.value.is_recoverable is True


class TestClassifyError:
    """エラー分類のテスト"""

    @pytest.mark.parametrize(
        "code,status,kind",
        [
            ("RequestLimitExceeded", 400, ProviderErrorKind.PROVIDER_UNAVAILABLE),
            ("InternalError", 500, ProviderErrorKind.PROVIDER_UNAVAILABLE),
            ("InvalidVolume.NotFound", 400, ProviderErrorKind.VALIDATION),
            ("IncorrectState", 400, ProviderErrorKind.VALIDATION),
            ("Weird", 0, ProviderErrorKind.UNEXPECTED),
        ],
    )
    def test_client_errors(self, code, status, kind):
        error = classify_error(client_error(code, status), "CreateSnapshot")

        assert error.kind == kind
        assert error.code == code
        assert "CreateSnapshot" in str(error)

    def test_connection_error_is_unavailable(self):
        error = classify_error(
            EndpointConnectionError(endpoint_url="https://ec2.example"), "DescribeInstances"
        )

        assert error.kind == ProviderErrorKind.PROVIDER_UNAVAILABLE

    def test_missing_credentials_is_unexpected(self):
        error = classify_error(NoCredentialsError(), "DescribeInstances")

        assert error.kind == ProviderErrorKind.UNEXPECTED
        assert error.is_recoverable is False
