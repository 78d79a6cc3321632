"""IR provider for JSON documents written by other compilers.

Document layout::

    {
      "name": "f", "signature": "(x::Int)", "rtype": "Int",
      "code": [
        {"kind": "expr", "head": "syncregion"},
        {"kind": "detach", "syncregion": "%1", "label": 3},
        {"kind": "gotoifnot", "cond": "%2", "dest": 4},
        {"kind": "goto", "label": 2},
        {"kind": "return", "val": "%5"},
        {"kind": "return"},
        "%3 + 1"
      ],
      "blocks": [{"stmts": [1, 2], "succs": [3, 2]}, ...],
      "domtree": [[2, 3], [], []]
    }

Statements and blocks are numbered from 1; ``stmts`` is the inclusive range
of a block's statements. ``domtree`` lists the children of every block and
is computed when missing. Operands written as ``%n`` and ``_n`` become SSA
values and arguments.
"""
import json
import logging
import pathlib
import re
from typing import Any, Dict, List

from codeviz.domtree import DominatorTree, domtree_from_children
from codeviz.ir import (Argument, BasicBlock, ControlFlowGraph, DetachNode, Expr, GotoIfNot, GotoNode,
                        IRError, ReattachNode, ReturnNode, SSAValue, SyncNode, with_preds)
from codeviz.view import IRCodeView

from .dominance import construct_domtree

logger = logging.getLogger(__name__)

class IRLoadError(Exception): pass

OPERAND_RE = re.compile(r"([%_])(\d+)$")

def operand(x: Any) -> Any:
    if isinstance(x, str):
        m = OPERAND_RE.match(x)
        if m:
            return SSAValue(int(m.group(2))) if m.group(1) == "%" else Argument(int(m.group(2)))
    return x

def statement(d: Any):
    if not isinstance(d, dict):
        return operand(d)
    kind = d.get("kind", "expr")
    try:
        if kind == "goto":
            return GotoNode(int(d["label"]))
        if kind == "gotoifnot":
            return GotoIfNot(operand(d["cond"]), int(d["dest"]))
        if kind == "return":
            return ReturnNode(operand(d["val"])) if "val" in d else ReturnNode()
        if kind == "expr":
            return Expr(str(d["head"]), tuple(operand(a) for a in d.get("args", [])))
        if kind == "detach":
            return DetachNode(operand(d["syncregion"]), int(d["label"]))
        if kind == "reattach":
            return ReattachNode(operand(d["syncregion"]), int(d["label"]))
        if kind == "sync":
            return SyncNode(operand(d["syncregion"]))
    except KeyError as e:
        raise IRLoadError(f"{kind} statement is missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise IRLoadError(f"{kind} statement: {e}") from e
    raise IRLoadError(f"unknown statement kind: {kind!r}")

def _block(i: int, d: Dict[str, Any]) -> BasicBlock:
    try:
        first, last = d["stmts"]
        return BasicBlock(range(int(first), int(last) + 1), tuple(int(s) for s in d.get("succs", [])))
    except (KeyError, TypeError, ValueError) as e:
        raise IRLoadError(f"block #{i}: expected {{\"stmts\": [first, last], \"succs\": [...]}}") from e

def _domtree(nodes: Any, nblocks: int) -> DominatorTree:
    if not isinstance(nodes, list) or not all(isinstance(node, list) for node in nodes):
        raise IRLoadError("domtree must be a list of child lists")
    try:
        children = [[int(c) for c in node] for node in nodes]
    except (TypeError, ValueError) as e:
        raise IRLoadError(f"domtree children must be block numbers: {e}") from e
    if len(children) != nblocks:
        raise IRLoadError(f"domtree has {len(children)} nodes for {nblocks} blocks")
    if any(not 1 <= c <= nblocks for node in children for c in node):
        raise IRLoadError("domtree refers to a block that does not exist")
    kids = [c for node in children for c in node]
    if 1 in kids or len(kids) != len(set(kids)):
        raise IRLoadError("domtree is not a tree rooted at block 1")
    tree = domtree_from_children(children)
    if any(tree[c].level == 0 for c in kids):              # cycle detached from the root
        raise IRLoadError("domtree is not a tree rooted at block 1")
    return tree

def view_from_dict(doc: Dict[str, Any]) -> IRCodeView:
    if not isinstance(doc, dict) or "blocks" not in doc or "code" not in doc:
        raise IRLoadError("IR document needs 'code' and 'blocks'")
    if not isinstance(doc["code"], list) or not isinstance(doc["blocks"], list):
        raise IRLoadError("'code' and 'blocks' must be lists")
    code = tuple(statement(s) for s in doc["code"])
    blocks: List[BasicBlock] = [_block(i, b) for i, b in enumerate(doc["blocks"], start=1)]
    try:
        cfg = ControlFlowGraph(blocks=with_preds(blocks), code=code).validate()
    except IRError as e:
        raise IRLoadError(str(e)) from e

    if "domtree" in doc:
        domtree = _domtree(doc["domtree"], len(blocks))
    else:
        domtree = construct_domtree(cfg.blocks)
    logger.debug("loaded %s: %d statements in %d blocks", doc.get("name", "f?"), len(code), len(blocks))
    return IRCodeView(cfg, name=str(doc.get("name", "f?")), signature=str(doc.get("signature", "(?)")),
                      rtype=doc.get("rtype"), domtree=domtree)

def loads(text: str) -> IRCodeView:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise IRLoadError(f"not a JSON document: {e}") from e
    return view_from_dict(doc)

def load(path) -> IRCodeView:
    try:
        text = pathlib.Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise IRLoadError(f"cannot read {path}: {e.strerror or e}") from e
    return loads(text)
