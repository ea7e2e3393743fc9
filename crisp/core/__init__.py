"""
Crisp リーダー - コアモジュール
"""
