"""
構文木 → テキスト変換

ノードを正規形のテキストに書き出す。ネストが深くてもスタックを
消費しないよう、再帰ではなく作業スタックで辿る。
"""

import io
from typing import Iterable, List, TextIO, Union

from langsmith import traceable

from ..config.settings import settings
from .nodes import Atom, Boolean, ListNode, Node, Number, Text


def quote_text(value: str) -> str:
    """文字列をダブルクォートで囲み、バックスラッシュと引用符をエスケープ"""
    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def write_node(node: Node, sink: TextIO) -> None:
    """ノードを正規形で sink に書き込む（書き込みエラーはそのまま送出）"""
    work: List[Union[Node, str]] = [node]
    while work:
        item = work.pop()
        if isinstance(item, str):
            sink.write(item)
        elif isinstance(item, ListNode):
            sink.write('(')
            work.append(')')
            children = list(item.items)
            for index in range(len(children) - 1, -1, -1):
                work.append(children[index])
                if index:
                    work.append(' ')
        elif isinstance(item, Boolean):
            sink.write('true' if item.value else 'false')
        elif isinstance(item, Number):
            sink.write(str(item.value))
        elif isinstance(item, Text):
            sink.write(quote_text(item.value))
        elif isinstance(item, Atom):
            sink.write(item.name)
        else:
            raise TypeError(f"未知のノード型です: {type(item).__name__}")


@traceable(name="print_node", project_name=settings.trace.langsmith_project)
def print_node(node: Node) -> str:
    """ノードを正規形のテキストに変換"""
    buffer = io.StringIO()
    write_node(node, buffer)
    return buffer.getvalue()


def print_program(nodes: Iterable[Node]) -> str:
    """トップレベルのノード列を空白区切りで出力"""
    buffer = io.StringIO()
    for index, node in enumerate(nodes):
        if index:
            buffer.write(' ')
        write_node(node, buffer)
    return buffer.getvalue()
