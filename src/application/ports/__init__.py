"""Application Ports (Interfaces)"""
from .gateways import (
    CreatedSnapshot,
    IComputeGateway,
    InstanceGroup,
    ProviderError,
    ProviderErrorKind,
    RECOVERABLE_ERROR_KINDS,
)

__all__ = [
    "CreatedSnapshot",
    "IComputeGateway",
    "InstanceGroup",
    "ProviderError",
    "ProviderErrorKind",
    "RECOVERABLE_ERROR_KINDS",
]
