"""EC2 Gateway implementation"""
from src.infrastructure.gateways.ec2.ec2_gateway import EC2Gateway, classify_error

__all__ = ["EC2Gateway", "classify_error"]
