"""
設定管理

トレースログとリーダーの設定

環境変数による設定例:
# パース操作のトレースを有効化し、JSON-L ファイルに書き出す
export CRISP_TRACE="true"
export CRISP_TRACE_FILE="crisp_trace.jsonl"

# LangSmith 側のプロジェクト名（LangSmith のトレースは LANGSMITH_TRACING で有効化）
export LANGSMITH_PROJECT="crisp"
"""

import os
from typing import Optional
from pydantic import BaseModel


_TRUTHY = ("true", "1", "yes")


class TraceConfig(BaseModel):
    """トレース設定

    enabled が False の場合、parse は明示的に渡されたロガーにのみ記録します。
    """
    enabled: bool = False
    output_file: Optional[str] = None
    langsmith_project: str = "crisp"


class ReaderConfig(BaseModel):
    """リーダー設定"""
    debug: bool = False


class Settings:
    """設定管理クラス"""

    def __init__(self):
        self.trace = TraceConfig()
        self.reader = ReaderConfig()

        # 環境変数から設定を読み込み
        self._load_from_env()

    def reload(self):
        """既定値に戻してから環境変数を再読み込み"""
        self.trace = TraceConfig()
        self.reader = ReaderConfig()
        self._load_from_env()

    def _load_from_env(self):
        """環境変数から設定を読み込み"""
        if os.getenv("CRISP_TRACE"):
            self.trace.enabled = os.getenv("CRISP_TRACE").lower() in _TRUTHY
        if os.getenv("CRISP_TRACE_FILE"):
            self.trace.output_file = os.getenv("CRISP_TRACE_FILE")
        if os.getenv("LANGSMITH_PROJECT"):
            self.trace.langsmith_project = os.getenv("LANGSMITH_PROJECT")

        if os.getenv("DEBUG"):
            self.reader.debug = os.getenv("DEBUG").lower() in _TRUTHY


# グローバル設定インスタンス
settings = Settings()
