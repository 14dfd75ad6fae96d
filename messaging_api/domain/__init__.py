"""
Domain Layer
メッセージ生成・バッチモデル・ポート定義
"""
