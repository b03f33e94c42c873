"""Shared helpers for working with the Tree/Token nodes the parser produces.

The AST is made of plain Lark `Tree`/`Token` objects. Each node's `data`
label comes from one of the closed sets below; identifiers are `IDENT` tokens
and operators are `OP` tokens.
"""
from __future__ import annotations
from typing import List, Optional, TypeGuard, Union

from lark import Token, Tree
from lark.tree import Meta
from typing_extensions import TypeAlias

Node: TypeAlias = Union[Tree, Token]

STATEMENT_LABELS = frozenset({
    'exprstmt',
    'fndef',
    'returnstmt',
    'ifstmt',
    'whilestmt',
    'forstmt',
    'assignstmt',
    'compound_assign',
    'stopstmt',
    'skipstmt',
})

EXPRESSION_LABELS = frozenset({
    'int',
    'float',
    'string',
    'bool',
    'none',
    'list',
    'dict',
    'prefix',
    'infix',
    'postfix',
    'index',
    'call',
    'unpack',
})

# Structural children that only appear inside statements/expressions
AUXILIARY_LABELS = frozenset({
    'program',
    'block',
    'params',
    'otherwise',
    'elseclause',
    'targets',
    'pair',
    'args',
})


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def is_ident(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token) and node.type == 'IDENT'

def tree_label(node: Node) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def child_by_label(node: Node, label: str) -> Optional[Tree]:
    for ch in tree_children(node):
        if tree_label(ch) == label:
            return ch

    return None

def children_by_label(node: Node, label: str) -> List[Tree]:
    return [ch for ch in tree_children(node) if tree_label(ch) == label]

def make_meta(line: int, column: int) -> Meta:
    """Build position metadata the way Lark attaches it to rule trees."""
    meta = Meta()
    meta.line = line
    meta.column = column
    meta.empty = False
    return meta

def node_meta(node: Node) -> Optional[Meta]:
    """Position info of a node, or None when it carries none."""
    if is_token(node):
        return node if getattr(node, 'line', None) is not None else None

    meta = node.meta
    if getattr(meta, 'empty', True):
        return None
    return meta
