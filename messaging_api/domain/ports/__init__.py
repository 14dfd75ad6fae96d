"""
Domain Ports
依存性逆転のためのインターフェース定義
"""

from .platform_port import IPlatformClient, OnRequest, RequestInfo

__all__ = [
    "IPlatformClient",
    "OnRequest",
    "RequestInfo",
]
