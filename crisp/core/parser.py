"""
Crisp リーダー - 1文字先読みの再帰下降パーサー

入力テキストを1回だけ先頭から読み、トップレベルのノード列を返す。
開いているリストは明示的なスタックで管理するため、ネストの深さは
Python の再帰制限に縛られない。
"""

import unicodedata
from enum import Enum
from pathlib import Path
from typing import List, Optional

from langchain_core.runnables import RunnableLambda
from langsmith import traceable

from ..config.settings import settings
from .nodes import FALSE, TRUE, Atom, ListNode, Node, Number
from .persistent_list import PersistentList
from .trace_logger import TraceLogger, TraceMetadata, get_global_logger

RESERVED_CHARS = frozenset('#[]{}"\'`')

# トレースに残す入力テキストの最大長（DEBUG 時は全文）
_TRACE_INPUT_LIMIT = 200


class ParseErrorKind(Enum):
    """パースエラーの種別"""
    RESERVED_CHAR = "reserved_char"
    BAD_LIST = "bad_list"


class ParseError(Exception):
    """パースエラー（回復不能、部分結果なし）"""

    kind: ParseErrorKind

    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.position = position


class ReservedCharError(ParseError):
    """ノードの開始位置に予約文字が現れた"""

    kind = ParseErrorKind.RESERVED_CHAR

    def __init__(self, char: str, position: int):
        super().__init__(f"予約文字 {char!r} はノードの先頭に使えません (位置 {position})", position)
        self.char = char


class BadListError(ParseError):
    """'(' に対応する ')' が見つからない"""

    kind = ParseErrorKind.BAD_LIST

    def __init__(self, position: int):
        super().__init__(f"リストが閉じられていません (位置 {position})", position)


def is_control(c: str) -> bool:
    return unicodedata.category(c) == 'Cc'


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_atom_start(c: str) -> bool:
    return not (c.isspace() or is_control(c) or is_digit(c)
                or c in '()' or c in RESERVED_CHARS)


def is_atom_char(c: str) -> bool:
    return not (c.isspace() or is_control(c) or c in '()')


class _Cursor:
    """入力テキスト上を前進するだけのカーソル"""
    __slots__ = ('text', 'pos')

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def peek(self) -> Optional[str]:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return None

    def advance(self) -> None:
        self.pos += 1

    def skip_spaces(self) -> None:
        """半角スペースだけを読み飛ばす（タブ等はトークン間では読み飛ばさない）"""
        text = self.text
        while self.pos < len(text) and text[self.pos] == ' ':
            self.pos += 1

    def take_while(self, predicate) -> str:
        start = self.pos
        text = self.text
        while self.pos < len(text) and predicate(text[self.pos]):
            self.pos += 1
        return text[start:self.pos]


def _scan_atom(cursor: _Cursor) -> Node:
    token = cursor.take_while(is_atom_char)
    # 真偽値はトークン全体が完全一致した場合のみ
    if token == 'true':
        return TRUE
    if token == 'false':
        return FALSE
    return Atom(token)


def _scan_number(cursor: _Cursor) -> Number:
    digits = cursor.take_while(is_digit)
    if cursor.peek() == '.':
        cursor.advance()
        # 小数部は読み進めるが値には含めない（整数表現）
        cursor.take_while(is_digit)
    return Number(int(digits))


def _read(cursor: _Cursor) -> List[Node]:
    # stack[0] がプログラム本体、それ以降は開いているリスト
    stack: List[List[Node]] = [[]]
    while True:
        cursor.skip_spaces()
        c = cursor.peek()
        if c is not None and c in RESERVED_CHARS:
            raise ReservedCharError(c, cursor.pos)
        if c is not None and is_atom_start(c):
            stack[-1].append(_scan_atom(cursor))
        elif c is not None and is_digit(c):
            stack[-1].append(_scan_number(cursor))
        elif c == '(':
            cursor.advance()
            stack.append([])
        elif len(stack) == 1:
            # トップレベル: ノードを開始できない文字か入力終端で終了
            return stack[0]
        elif c == ')':
            cursor.advance()
            items = stack.pop()
            stack[-1].append(ListNode(PersistentList.from_vec(items)))
        else:
            raise BadListError(cursor.pos)


def _measure(nodes: List[Node]) -> TraceMetadata:
    """ノード数と最大ネスト深度を数える"""
    metadata = TraceMetadata(top_level_count=len(nodes))
    work = [(node, 0) for node in nodes]
    while work:
        node, depth = work.pop()
        metadata.node_count += 1
        if isinstance(node, ListNode):
            metadata.max_depth = max(metadata.max_depth, depth + 1)
            work.extend((child, depth + 1) for child in node.items)
    return metadata


def _active_logger(trace_logger: Optional[TraceLogger]) -> Optional[TraceLogger]:
    if trace_logger is not None:
        return trace_logger
    if settings.trace.enabled:
        return get_global_logger()
    return None


@traceable(name="parse_crisp", project_name=settings.trace.langsmith_project)
def parse(text: str, trace_logger: Optional[TraceLogger] = None) -> List[Node]:
    """
    Crisp のソーステキストを解析し、トップレベルのノード列を返す

    Args:
        text: ソーステキスト
        trace_logger: 記録先のトレースロガー（省略時は設定に従う）

    Returns:
        トップレベルのノード列（空入力なら空リスト）

    Raises:
        ReservedCharError: ノードの先頭位置に予約文字があった場合
        BadListError: リストが閉じられないまま終端または不正な文字に達した場合
    """
    logger = _active_logger(trace_logger)
    entry_id = None
    if logger is not None:
        traced_input = text if settings.reader.debug else text[:_TRACE_INPUT_LIMIT]
        entry_id = logger.start_operation("parse", traced_input, f"{len(text)} 文字を解析")

    cursor = _Cursor(text)
    try:
        nodes = _read(cursor)
    except ParseError as e:
        if logger is not None:
            metadata = TraceMetadata(
                consumed=cursor.pos,
                error_kind=e.kind.value,
                error_position=e.position,
            )
            logger.log_error(entry_id, e, metadata)
        raise

    if logger is not None:
        metadata = _measure(nodes)
        metadata.consumed = cursor.pos
        metadata.unconsumed = len(text) - cursor.pos
        logger.end_operation(entry_id, [node.kind.value for node in nodes], metadata)
    return nodes


def parse_file(path: Path, trace_logger: Optional[TraceLogger] = None) -> List[Node]:
    """ファイル全体を読み込んで解析"""
    with open(path, 'r', encoding='utf-8') as f:
        return parse(f.read(), trace_logger)


# Langchain Runnable として公開
parser_runnable = RunnableLambda(parse)
