"""
Core
キーケース変換・設定・例外・ログの共通基盤
"""
