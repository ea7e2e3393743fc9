"""
Crisp リーダー - 設定モジュール
"""
