"""
パース・出力処理のトレースログ機能

JSON-L形式での操作ログ出力と構文木の統計メタデータ収集を提供します。
"""

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


@dataclass
class TraceMetadata:
    """操作メタデータ"""
    top_level_count: int = 0        # トップレベルのノード数
    node_count: int = 0             # 木全体のノード数
    max_depth: int = 0              # リストの最大ネスト深度
    consumed: int = 0               # 読み進めた文字数
    unconsumed: int = 0             # 読み残した文字数（トップレベルで停止した場合）
    error: Optional[str] = None
    error_kind: Optional[str] = None
    error_position: Optional[int] = None
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TraceEntry:
    """トレースログエントリ"""
    timestamp: str
    operation: str
    input: Any
    output: Any
    duration_ms: float
    explanation: str
    metadata: TraceMetadata

    def to_json_line(self) -> str:
        """JSON-L形式で出力"""
        data = asdict(self)
        return json.dumps(data, ensure_ascii=False, separators=(',', ':'), default=str)


class TraceLogger:
    """パーサー・プリンターのトレースロガー"""

    def __init__(self, output_file: Optional[Path] = None):
        self.output_file = output_file
        self.entries: List[TraceEntry] = []
        self._started: Dict[int, float] = {}

    def start_operation(self, operation: str, input_data: Any, explanation: str = "") -> int:
        """操作開始をログ"""
        entry_id = len(self.entries)
        entry = TraceEntry(
            timestamp=self._current_timestamp(),
            operation=operation,
            input=input_data,
            output=None,
            duration_ms=0,
            explanation=explanation,
            metadata=TraceMetadata()
        )
        self.entries.append(entry)
        self._started[entry_id] = time.perf_counter()
        return entry_id

    def end_operation(self, entry_id: int, output: Any, metadata: Optional[TraceMetadata] = None):
        """操作終了とログ出力"""
        if entry_id >= len(self.entries):
            return

        entry = self.entries[entry_id]
        started = self._started.pop(entry_id, None)
        if started is not None:
            entry.duration_ms = (time.perf_counter() - started) * 1000
        entry.output = output
        if metadata:
            entry.metadata = metadata

        if self.output_file:
            self._write_to_file(entry)

    def log_error(self, entry_id: int, error: Exception, metadata: Optional[TraceMetadata] = None):
        """開始済みの操作をエラーとして終了"""
        if entry_id >= len(self.entries):
            return

        entry = self.entries[entry_id]
        started = self._started.pop(entry_id, None)
        if started is not None:
            entry.duration_ms = (time.perf_counter() - started) * 1000
        entry.metadata = metadata or TraceMetadata()
        entry.metadata.error = str(error)
        entry.explanation = f"エラー: {entry.explanation}" if entry.explanation else "エラー"

        if self.output_file:
            self._write_to_file(entry)

    def get_recent_entries(self, count: int = 10) -> List[TraceEntry]:
        """最近のエントリを取得"""
        return self.entries[-count:]

    def clear(self):
        """ログをクリア"""
        self.entries.clear()
        self._started.clear()

    def get_summary(self) -> Dict[str, Any]:
        """操作全体のサマリーを取得"""
        operations: Dict[str, int] = {}
        errors = 0
        for entry in self.entries:
            operations[entry.operation] = operations.get(entry.operation, 0) + 1
            if entry.metadata.error is not None:
                errors += 1

        return {
            "total_operations": len(self.entries),
            "total_duration_ms": sum(entry.duration_ms for entry in self.entries),
            "operations": operations,
            "errors": errors,
            "max_depth": max((entry.metadata.max_depth for entry in self.entries), default=0),
        }

    def _current_timestamp(self) -> str:
        """現在のタイムスタンプを取得"""
        now = time.time()
        millis = int((now % 1) * 1000)
        return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(now)) + f".{millis:03d}Z"

    def _write_to_file(self, entry: TraceEntry):
        """ファイルに書き込み"""
        with open(self.output_file, 'a', encoding='utf-8') as f:
            f.write(entry.to_json_line() + '\n')


# グローバルロガーインスタンス
_global_logger: Optional[TraceLogger] = None


def get_global_logger() -> TraceLogger:
    """グローバルロガーを取得"""
    global _global_logger
    if _global_logger is None:
        from ..config.settings import settings
        output = settings.trace.output_file
        _global_logger = TraceLogger(Path(output) if output else None)
    return _global_logger


def set_global_logger(logger: Optional[TraceLogger]):
    """グローバルロガーを設定（None でリセット）"""
    global _global_logger
    _global_logger = logger


def configure_trace_logging(output_file: Optional[Union[str, Path]] = None) -> TraceLogger:
    """トレースログを設定"""
    output_path = Path(output_file) if output_file else None
    logger = TraceLogger(output_path)
    set_global_logger(logger)
    return logger
