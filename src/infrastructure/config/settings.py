"""Application Settings"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    アプリケーション設定

    12-Factor App の Config 原則に従い、
    すべての設定は環境変数から取得する。
    スナップショットの選択ポリシーやタグ付けはここでは変更できない。
    """

    # Service
    service_name: str = "deployment-snapshot"
    log_level: str = "INFO"

    # AWS (未設定なら boto3 の既定の解決順に従う)
    aws_region: Optional[str] = None

    # 並行して発行する CreateSnapshot の上限 (未設定なら無制限)
    max_concurrency: Optional[int] = Field(default=None, ge=1)

    class Config:
        env_prefix = "SNAPSHOT_"
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """設定のシングルトンインスタンスを取得"""
    return Settings()
