"""
Crisp リーダー

最小限のS式言語を構文木に変換するパーサーと、リストノードを支える永続リスト
"""

from .core.persistent_list import PersistentList
from .core.nodes import (
    FALSE,
    TRUE,
    Atom,
    Boolean,
    ListNode,
    Node,
    NodeKind,
    Number,
    Text,
    atom,
    false_,
    list_from_vec,
    list_node,
    number,
    text,
    true_,
)
from .core.parser import (
    BadListError,
    ParseError,
    ParseErrorKind,
    ReservedCharError,
    parse,
    parse_file,
    parser_runnable,
)
from .core.printer import print_node, print_program, quote_text, write_node

__all__ = [
    "PersistentList",
    "Node",
    "NodeKind",
    "ListNode",
    "Number",
    "Atom",
    "Text",
    "Boolean",
    "TRUE",
    "FALSE",
    "true_",
    "false_",
    "atom",
    "number",
    "text",
    "list_node",
    "list_from_vec",
    "parse",
    "parse_file",
    "parser_runnable",
    "ParseError",
    "ParseErrorKind",
    "ReservedCharError",
    "BadListError",
    "print_node",
    "print_program",
    "write_node",
    "quote_text",
]
