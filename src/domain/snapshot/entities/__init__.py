"""Snapshot Entities"""
from .instance import Instance

__all__ = ["Instance"]
