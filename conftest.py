"""
pytest 共通設定
"""

import os

import pytest

# テスト中は LangSmith への送信を行わない
os.environ["LANGSMITH_TRACING"] = "false"
os.environ.pop("CRISP_TRACE", None)


@pytest.fixture(autouse=True)
def reset_global_logger():
    """テストごとにグローバルロガーをリセット"""
    from crisp.core.trace_logger import set_global_logger
    set_global_logger(None)
    yield
    set_global_logger(None)
