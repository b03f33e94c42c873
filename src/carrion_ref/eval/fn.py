from __future__ import annotations

from lark import Tree

from ..runtime import Environment, CrnFunction, CrnNone
from ..tree import tree_children

def eval_fn_def(n: Tree, env: Environment) -> CrnNone:
    """Bind a `spell` definition under its name. Defining yields none."""
    name_tok, params_node, body = n.children
    params = [str(p.value) for p in tree_children(params_node)]
    env.set(str(name_tok.value), CrnFunction(name=str(name_tok.value), params=params, body=body))
    return CrnNone()
