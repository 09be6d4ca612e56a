"""
Deployment Snapshot Lambda Handler

deploymentId タグが一致する EC2 インスタンスを検索し、
ルート以外のデータボリュームの EBS スナップショットを作成する。

- API 呼び出し: {"deploymentId": "..."}
- リリースパイプライン (Step Functions): {"deploymentId": "...", "releaseId": "..."}

個々のスナップショットの失敗はログにのみ記録され、レスポンスには反映されない。
"""
import asyncio
import json
from functools import lru_cache
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field, StrictStr, ValidationError, field_validator

from src.application.use_cases.snapshot import (
    SnapshotDeploymentInput,
    SnapshotDeploymentUseCase,
)
from src.infrastructure.config import get_settings
from src.infrastructure.gateways import EC2Gateway
from src.infrastructure.logging_config import configure_logging

logger = structlog.get_logger()

UNSUPPORTED_EVENT_MESSAGE = "Unsupported event"
SUCCESS_MESSAGE = "Successful lambda invocation"


class SnapshotEvent(BaseModel):
    """呼び出しイベント"""

    deployment_id: StrictStr = Field(..., alias="deploymentId")
    release_id: Optional[StrictStr] = Field(default=None, alias="releaseId")

    class Config:
        extra = "ignore"

    @field_validator("deployment_id")
    @classmethod
    def _deployment_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("deploymentId must not be empty")
        return value

    @field_validator("release_id", mode="before")
    @classmethod
    def _empty_release_id_is_none(cls, value: Any) -> Any:
        # releaseId は任意。空値は「リリースなし」として扱う
        return value or None


def create_response(status_code: int, message: str) -> dict:
    """Lambda レスポンスを作成"""
    return {
        "statusCode": status_code,
        "body": json.dumps({"message": message}),
    }


def parse_event(event: Any) -> Optional[SnapshotEvent]:
    """イベントを検証。不正なら None"""
    if not isinstance(event, dict):
        return None
    try:
        return SnapshotEvent.model_validate(event)
    except ValidationError as e:
        logger.warning("event_validation_failed", errors=e.errors(include_url=False))
        return None


def handle(event: Any, use_case: SnapshotDeploymentUseCase) -> dict:
    """
    イベントを処理

    deploymentId がなければ 500 を返し、プロバイダは呼び出さない。
    それ以外は全スナップショット試行の完了を待って 200 を返す。
    """
    snapshot_event = parse_event(event)
    if snapshot_event is None:
        logger.warning("unsupported_event")
        return create_response(500, UNSUPPORTED_EVENT_MESSAGE)

    structlog.contextvars.bind_contextvars(
        deployment_id=snapshot_event.deployment_id,
        release_id=snapshot_event.release_id,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        loop.run_until_complete(
            use_case.execute(
                SnapshotDeploymentInput(
                    deployment_id=snapshot_event.deployment_id,
                    release_id=snapshot_event.release_id,
                )
            )
        )
    finally:
        loop.close()
        asyncio.set_event_loop(None)

    return create_response(200, SUCCESS_MESSAGE)


@lru_cache()
def get_use_case() -> SnapshotDeploymentUseCase:
    """コールドスタート時に一度だけユースケースを組み立てる"""
    settings = get_settings()
    return SnapshotDeploymentUseCase(
        compute_gateway=EC2Gateway(region=settings.aws_region),
        max_concurrency=settings.max_concurrency,
    )


def lambda_handler(event: dict, context: Any) -> dict:
    """Lambda エントリポイント"""
    settings = get_settings()
    configure_logging(settings.log_level)

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=getattr(context, "aws_request_id", None),
        service=settings.service_name,
    )
    logger.info("event_received", payload=event)

    try:
        return handle(event, get_use_case())
    except Exception:
        logger.exception("snapshot_run_aborted")
        raise
