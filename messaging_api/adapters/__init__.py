"""
Adapters Layer
ポートインターフェースの具体的な実装
"""

__all__ = [
    "platforms",
]
