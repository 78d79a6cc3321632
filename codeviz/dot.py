"""Graphviz descriptions of a control-flow graph and its dominator tree.

Both builders emit one ``record`` node per basic block (numbered from 1) and
return a fresh :class:`graphviz.Digraph`; nothing here talks to the ``dot``
binary, see :mod:`codeviz.lazydot` for that.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

from graphviz import Digraph

from .domtree import DominatorTree
from .ir import ControlFlowGraph, DetachNode, Expr, ReattachNode, ReturnNode, SyncNode
from .labels import escape_dot_label, stmt_line

Edge = Tuple[int, int, Dict[str, str]]

# ---------- block renderer ----------
def find_syncregions(cfg: ControlFlowGraph, i: int) -> List[int]:
    ids = []
    for s in cfg.block(i).stmts:
        stmt = cfg.stmt(s)
        if isinstance(stmt, Expr) and stmt.head == "syncregion":
            ids.append(s)
    return ids

def block_tag(cfg: ControlFlowGraph, i: int) -> str:
    term = cfg.terminator(i)
    if isinstance(term, ReturnNode):
        return f"#{i}⏎" if term.has_value else f"#{i}⚠"
    ids = find_syncregions(cfg, i)
    if ids:
        return f"#{i} SR(" + ", ".join(f"%{s}" for s in ids) + ")"
    return f"#{i}"

def block_code(cfg: ControlFlowGraph, i: int) -> str:
    return "".join(escape_dot_label(stmt_line(s, cfg.stmt(s))) + "\\l" for s in cfg.block(i).stmts)

def block_label(cfg: ControlFlowGraph, i: int, tag: str, include_code: bool) -> Dict[str, str]:
    """Node attributes for block ``i``.

    With ``include_code`` the statements are part of the record body,
    otherwise the body only shows ``tag`` and the statements move into the
    hover tooltip.
    """
    code = block_code(cfg, i)
    if include_code:
        return {"label": "{" + escape_dot_label(tag) + ":\\l" + code + "}"}
    return {"label": "{" + escape_dot_label(tag) + "}", "tooltip": code}

# ---------- edges ----------
def cfg_edges(cfg: ControlFlowGraph, i: int) -> List[Edge]:
    bb = cfg.block(i)
    term = cfg.terminator(i)
    succs = list(bb.succs)

    if isinstance(term, DetachNode) and len(succs) == 2 and term.label in succs:
        others = [s for s in succs if s != term.label]
        if len(others) == 1:
            return [
                (i, term.label, {"label": f"C({term.syncregion})"}),
                (i, others[0], {"label": f"D({term.syncregion})"}),
            ]
    if isinstance(term, ReattachNode) and succs == [term.label]:
        return [(i, term.label, {"label": f"R({term.syncregion})"})]
    if isinstance(term, SyncNode) and len(succs) == 1:
        return [(i, succs[0], {"label": f"S({term.syncregion})"})]

    attrs: Dict[str, str] = {}
    if isinstance(term, Expr) and term.head == "enter":
        attrs["label"] = "E"
    elif isinstance(term, Expr) and term.head == "leave":
        attrs["label"] = "L"
    edges = []
    for s in succs:
        a = dict(attrs)
        if s == i:
            a["dir"] = "back"   # self-loop
        edges.append((i, s, a))
    return edges

# ---------- graphs ----------
def _digraph(title: str) -> Digraph:
    name = escape_dot_label(title)
    g = Digraph(name, node_attr={"shape": "record"})
    g.attr(label=name)
    return g

def cfg_graphviz(cfg: ControlFlowGraph, title: str, include_code: bool = True) -> Digraph:
    g = _digraph(title)
    for i in range(1, len(cfg.blocks) + 1):
        g.node(str(i), **block_label(cfg, i, block_tag(cfg, i), include_code))
        for tail, head, attrs in cfg_edges(cfg, i):
            g.edge(str(tail), str(head), **attrs)
    return g

def domtree_graphviz(cfg: ControlFlowGraph, domtree: DominatorTree, title: str,
                     include_code: bool = True) -> Digraph:
    assert len(domtree.nodes) == len(cfg.blocks), \
        f"dominator tree has {len(domtree.nodes)} nodes for {len(cfg.blocks)} blocks"
    g = _digraph(title)
    for i, node in enumerate(domtree.nodes, start=1):
        # dominance view: plain index, no return/fork decoration
        g.node(str(i), **block_label(cfg, i, str(i), include_code))
        for c in node.children:
            g.edge(str(i), str(c))
    return g

def cfg_dot_source(cfg: ControlFlowGraph, title: str, include_code: bool = True) -> str:
    return cfg_graphviz(cfg, title, include_code).source

def domtree_dot_source(cfg: ControlFlowGraph, domtree: DominatorTree, title: str,
                       include_code: bool = True) -> str:
    return domtree_graphviz(cfg, domtree, title, include_code).source
