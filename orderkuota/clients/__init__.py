"""Clients module - HTTP clients for the OkeConnect gateway and the app API."""

from .base import BaseClient
from .gateway import GatewayClient
from .app import AppClient

__all__ = ["BaseClient", "GatewayClient", "AppClient"]
