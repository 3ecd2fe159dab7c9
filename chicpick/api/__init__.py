"""Clients for external AI services."""

from .aitunnel_client import AITunnelClient, AITunnelRequestError

__all__ = ["AITunnelClient", "AITunnelRequestError"]
