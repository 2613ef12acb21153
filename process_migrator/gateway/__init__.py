"""Gateways to the workflow engine."""

from .base import EngineGateway
from .camunda import CamundaGateway

__all__ = [
    "EngineGateway",
    "CamundaGateway",
]
