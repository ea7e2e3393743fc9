"""
トレースログと設定のテスト
"""

import json

import pytest

from crisp.config.settings import Settings, settings
from crisp.core import trace_logger as trace_module
from crisp.core.parser import BadListError, parse
from crisp.core.trace_logger import (
    TraceLogger,
    TraceMetadata,
    configure_trace_logging,
    get_global_logger,
    set_global_logger,
)


class TestTraceLogger:
    """TraceLogger のテスト"""

    def test_start_and_end_operation(self):
        """操作の開始と終了"""
        logger = TraceLogger()
        entry_id = logger.start_operation("parse", "(a)", "テスト")
        logger.end_operation(entry_id, ["list"], TraceMetadata(node_count=2))

        entry = logger.entries[entry_id]
        assert entry.operation == "parse"
        assert entry.input == "(a)"
        assert entry.output == ["list"]
        assert entry.duration_ms >= 0
        assert entry.metadata.node_count == 2

    def test_end_unknown_entry_is_ignored(self):
        logger = TraceLogger()
        logger.end_operation(5, None)
        assert logger.entries == []

    def test_writes_json_lines(self, tmp_path):
        """JSON-L ファイルへの出力"""
        output = tmp_path / "trace.jsonl"
        logger = TraceLogger(output)
        parse("(+ 1 2) x", trace_logger=logger)

        lines = output.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        data = json.loads(lines[0])
        assert data["operation"] == "parse"
        assert data["output"] == ["list", "atom"]
        assert data["metadata"]["node_count"] == 5
        assert data["metadata"]["top_level_count"] == 2

    def test_recent_entries_and_clear(self):
        logger = TraceLogger()
        for source in ["a", "b", "c"]:
            parse(source, trace_logger=logger)
        assert [entry.input for entry in logger.get_recent_entries(2)] == ["b", "c"]
        logger.clear()
        assert logger.entries == []

    def test_summary(self):
        """サマリーの集計"""
        logger = TraceLogger()
        parse("((a))", trace_logger=logger)
        with pytest.raises(BadListError):
            parse("(a", trace_logger=logger)

        summary = logger.get_summary()
        assert summary["total_operations"] == 2
        assert summary["operations"] == {"parse": 2}
        assert summary["errors"] == 1
        assert summary["max_depth"] == 2


class TestParseTracing:
    """parse のトレース記録テスト"""

    def test_metadata_for_success(self):
        logger = TraceLogger()
        parse("(a (b c)) 7", trace_logger=logger)
        metadata = logger.entries[0].metadata
        assert metadata.top_level_count == 2
        assert metadata.node_count == 6
        assert metadata.max_depth == 2
        assert metadata.consumed == 11
        assert metadata.unconsumed == 0
        assert metadata.error is None

    def test_unconsumed_input_is_recorded(self):
        """トップレベルで停止した場合の読み残し"""
        logger = TraceLogger()
        assert parse("a\tb c", trace_logger=logger)
        metadata = logger.entries[0].metadata
        assert metadata.consumed == 1
        assert metadata.unconsumed == 4

    def test_metadata_for_error(self):
        logger = TraceLogger()
        with pytest.raises(BadListError):
            parse("(1 2", trace_logger=logger)
        metadata = logger.entries[0].metadata
        assert metadata.error_kind == "bad_list"
        assert metadata.error_position == 4
        assert metadata.error is not None

    def test_long_input_is_truncated(self):
        logger = TraceLogger()
        source = "a " * 500
        parse(source, trace_logger=logger)
        assert len(logger.entries[0].input) == 200

    def test_debug_keeps_full_input(self, monkeypatch):
        monkeypatch.setattr(settings.reader, "debug", True)
        logger = TraceLogger()
        source = "a " * 500
        parse(source, trace_logger=logger)
        assert logger.entries[0].input == source

    def test_global_logger_used_when_enabled(self, monkeypatch):
        """設定で有効化するとグローバルロガーに記録"""
        logger = configure_trace_logging()
        monkeypatch.setattr(settings.trace, "enabled", True)
        parse("(x)")
        assert get_global_logger() is logger
        assert len(logger.entries) == 1

    def test_nothing_recorded_when_disabled(self, monkeypatch):
        logger = configure_trace_logging()
        monkeypatch.setattr(settings.trace, "enabled", False)
        parse("(x)")
        assert logger.entries == []


class TestGlobalLogger:
    """グローバルロガーのテスト"""

    def test_lazy_creation_uses_settings(self, monkeypatch, tmp_path):
        output = tmp_path / "global.jsonl"
        monkeypatch.setattr(settings.trace, "output_file", str(output))
        set_global_logger(None)
        logger = get_global_logger()
        assert logger.output_file == output

    def test_configure_trace_logging(self, tmp_path):
        logger = configure_trace_logging(tmp_path / "t.jsonl")
        assert trace_module.get_global_logger() is logger


class TestSettings:
    """環境変数からの設定読み込みテスト"""

    def test_defaults(self, monkeypatch):
        for name in ["CRISP_TRACE", "CRISP_TRACE_FILE", "LANGSMITH_PROJECT", "DEBUG"]:
            monkeypatch.delenv(name, raising=False)
        config = Settings()
        assert config.trace.enabled is False
        assert config.trace.output_file is None
        assert config.trace.langsmith_project == "crisp"
        assert config.reader.debug is False

    def test_load_from_env(self, monkeypatch):
        monkeypatch.setenv("CRISP_TRACE", "yes")
        monkeypatch.setenv("CRISP_TRACE_FILE", "out.jsonl")
        monkeypatch.setenv("LANGSMITH_PROJECT", "crisp-test")
        monkeypatch.setenv("DEBUG", "1")
        config = Settings()
        assert config.trace.enabled is True
        assert config.trace.output_file == "out.jsonl"
        assert config.trace.langsmith_project == "crisp-test"
        assert config.reader.debug is True

    def test_reload(self, monkeypatch):
        monkeypatch.delenv("CRISP_TRACE", raising=False)
        config = Settings()
        monkeypatch.setenv("CRISP_TRACE", "true")
        config.reload()
        assert config.trace.enabled is True
        monkeypatch.setenv("CRISP_TRACE", "off")
        config.reload()
        assert config.trace.enabled is False
