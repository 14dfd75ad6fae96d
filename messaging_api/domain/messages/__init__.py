"""
Message Factories
プラットフォームごとのメッセージオブジェクト生成

使用例:
    from messaging_api.domain.messages import line, messenger
    line.create_text("hello")
"""

from . import line, messenger

__all__ = [
    "line",
    "messenger",
]
