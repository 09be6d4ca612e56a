"""Gateway implementations"""
from src.infrastructure.gateways.ec2 import EC2Gateway

__all__ = ["EC2Gateway"]
