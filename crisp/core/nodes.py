"""
構文木ノード

リスト・数値・アトム・文字列・真偽値の閉じたノード集合。
ノードはすべて不変で、リストノードの中身は PersistentList で保持する。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .persistent_list import PersistentList


class NodeKind(Enum):
    """ノードの種別"""
    LIST = "list"
    NUMBER = "number"
    ATOM = "atom"
    TEXT = "text"
    TRUE = "true"
    FALSE = "false"


class Node(ABC):
    """構文木ノードの基底クラス"""
    __slots__ = ()

    @property
    @abstractmethod
    def kind(self) -> NodeKind:
        """ノードの種別"""
        pass


@dataclass(frozen=True, eq=False)
class ListNode(Node):
    """リストノード

    等価性とハッシュは PersistentList に委ねる。入れ子の ListNode は
    PersistentList 側の作業スタックで辿るので、深いネストでも再帰しない。
    """
    items: PersistentList[Node]

    def _as_persistent_list(self) -> PersistentList[Node]:
        return self.items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ListNode):
            return NotImplemented
        return self.items == other.items

    def __hash__(self) -> int:
        return hash(self.items)

    @property
    def kind(self) -> NodeKind:
        return NodeKind.LIST


@dataclass(frozen=True)
class Number(Node):
    """数値ノード（整数）"""
    value: int

    @property
    def kind(self) -> NodeKind:
        return NodeKind.NUMBER


@dataclass(frozen=True)
class Atom(Node):
    """アトム（シンボル・演算子など引用符なしのトークン）"""
    name: str

    @property
    def kind(self) -> NodeKind:
        return NodeKind.ATOM


@dataclass(frozen=True)
class Text(Node):
    """文字列ノード（パーサーからは生成されない）"""
    value: str

    @property
    def kind(self) -> NodeKind:
        return NodeKind.TEXT


@dataclass(frozen=True)
class Boolean(Node):
    """真偽値リテラル"""
    value: bool

    @property
    def kind(self) -> NodeKind:
        return NodeKind.TRUE if self.value else NodeKind.FALSE


TRUE = Boolean(True)
FALSE = Boolean(False)


# コンストラクタヘルパー（検証は行わない。検証はパーサーの責務）

def true_() -> Boolean:
    return TRUE


def false_() -> Boolean:
    return FALSE


def atom(name: str) -> Atom:
    return Atom(name)


def number(value: int) -> Number:
    return Number(value)


def text(value: str) -> Text:
    return Text(value)


def list_node(items: PersistentList[Node]) -> ListNode:
    return ListNode(items)


def list_from_vec(nodes: Iterable[Node]) -> ListNode:
    """ノード列から ListNode を作成"""
    return ListNode(PersistentList.from_vec(nodes))
