"""
Lambda Handlers for Deployment Snapshot

サーバレス構成のエントリポイント:
- Snapshot (deploymentId タグ一致インスタンスの EBS スナップショット)
"""
