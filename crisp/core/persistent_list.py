"""
永続リスト (persistent singly linked list)

一度作ったセルは二度と書き換えない。cons は新しい先頭セルを1つ作って
既存のチェーンを指すだけなので、複数のリスト値が同じ末尾を共有できる。
"""

import sys
from typing import Any, Generic, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")

_getrefcount = sys.getrefcount


class _Cell:
    """チェーンの1セル（不変）"""
    __slots__ = ("elem", "next")

    def __init__(self, elem: Any, next: Optional["_Cell"]):
        self.elem = elem
        self.next = next


class _Iter(Generic[T]):
    """先頭から末尾へ進むイテレータ"""
    __slots__ = ("_cell",)

    def __init__(self, cell: Optional[_Cell]):
        self._cell = cell

    def __iter__(self) -> "_Iter[T]":
        return self

    def __next__(self) -> T:
        cell = self._cell
        if cell is None:
            raise StopIteration
        self._cell = cell.next
        return cell.elem


class PersistentList(Generic[T]):
    """
    不変な単方向リスト

    - cons / head / tail はすべて O(1)
    - tail はコピーせずにチェーンを共有する
    - 解放はループで行うので、長いチェーンでもスタックを消費しない
    """
    __slots__ = ("_head",)

    def __init__(self):
        self._head: Optional[_Cell] = None

    @classmethod
    def _from_cell(cls, cell: Optional[_Cell]) -> "PersistentList[T]":
        lst = cls.__new__(cls)
        lst._head = cell
        return lst

    @classmethod
    def new(cls) -> "PersistentList[T]":
        """空リストを作成"""
        return cls()

    @classmethod
    def from_vec(cls, items: Iterable[T]) -> "PersistentList[T]":
        """順序を保ったままリストを構築"""
        if not isinstance(items, (list, tuple)):
            items = list(items)
        head = None
        for elem in reversed(items):
            head = _Cell(elem, head)
        return cls._from_cell(head)

    def cons(self, elem: T) -> "PersistentList[T]":
        """elem を先頭に追加した新しいリストを返す"""
        return PersistentList._from_cell(_Cell(elem, self._head))

    def head(self) -> Optional[T]:
        """先頭要素（空なら None）"""
        if self._head is None:
            return None
        return self._head.elem

    def tail(self) -> "PersistentList[T]":
        """先頭を除いたリスト（空リストの tail は空リスト）"""
        if self._head is None:
            return self
        return PersistentList._from_cell(self._head.next)

    def is_empty(self) -> bool:
        return self._head is None

    def iter(self) -> Iterator[T]:
        """毎回独立したイテレータを返す"""
        return _Iter(self._head)

    def __iter__(self) -> Iterator[T]:
        return _Iter(self._head)

    def __len__(self) -> int:
        count = 0
        cell = self._head
        while cell is not None:
            count += 1
            cell = cell.next
        return count

    def __bool__(self) -> bool:
        return self._head is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PersistentList):
            return NotImplemented
        # 入れ子のリストは再帰呼び出しせず作業スタックに積んで比較する
        pending = [(self._head, other._head)]
        while pending:
            a, b = pending.pop()
            while a is not None and b is not None:
                # 共有された末尾に到達したら残りは同一
                if a is b:
                    a = b = None
                    break
                x, y = a.elem, b.elem
                if x is not y:
                    nested_x, nested_y = _nested(x), _nested(y)
                    if nested_x is not None or nested_y is not None:
                        if nested_x is None or nested_y is None or type(x) is not type(y):
                            return False
                        pending.append((nested_x._head, nested_y._head))
                    elif x != y:
                        return False
                a, b = a.next, b.next
            if a is not b:
                return False
        return True

    def __hash__(self) -> int:
        # 後行順の畳み込み: 各フレームは (次のセル, 子のハッシュ値, 型)
        stack = [(self._head, [], PersistentList)]
        while True:
            cell, hashes, tag = stack[-1]
            if cell is None:
                stack.pop()
                value = hash((tag, tuple(hashes)))
                if not stack:
                    return value
                stack[-1][1].append(value)
                continue
            stack[-1] = (cell.next, hashes, tag)
            nested = _nested(cell.elem)
            if nested is None:
                hashes.append(hash(cell.elem))
            else:
                stack.append((nested._head, [], type(cell.elem)))

    def __repr__(self) -> str:
        parts: List[str] = [repr(elem) for elem in self]
        return f"PersistentList([{', '.join(parts)}])"

    def __del__(self):
        # 自分だけが参照しているセルを先頭から順に切り離す。
        # 他のリストと共有しているセルに当たったらそこで止める。
        # 共有されていないセルの参照はローカル変数 cell と getrefcount の引数の2つ。
        # 実装によって値が小さく出ても、共有セルは他の所有者が保持しているので
        # 走査が伸びるだけで解放されることはない。
        cell = self._head
        self._head = None
        while cell is not None and _getrefcount(cell) <= 2:
            cell = cell.next


def _nested(elem: Any) -> Optional[PersistentList]:
    """要素が入れ子のリストなら中身の PersistentList を返す

    PersistentList 自身か、_as_persistent_list() を持つ型（ListNode など）が対象。
    """
    if isinstance(elem, PersistentList):
        return elem
    unwrap = getattr(type(elem), "_as_persistent_list", None)
    if unwrap is None:
        return None
    return unwrap(elem)
