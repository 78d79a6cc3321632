"""Dominator trees for block lists, in the shape the dominator view expects.

Immediate dominators come from the iterative scheme of Cooper, Harvey and
Kennedy ("A Simple, Fast Dominance Algorithm"): number the reachable blocks
in reverse postorder, then intersect predecessor dominators until nothing
changes. Block 1 is the entry. Blocks not reachable from it stay out of the
tree (level 0, no parent).
"""
from typing import Dict, List, Optional, Sequence

from codeviz.domtree import DominatorTree, domtree_from_children
from codeviz.ir import BasicBlock

def reverse_postorder(blocks: Sequence[BasicBlock]) -> List[int]:
    if not blocks:
        return []
    seen = {1}
    order: List[int] = []
    stack = [(1, iter(blocks[0].succs))]
    while stack:
        node, it = stack[-1]
        for s in it:
            if s not in seen:
                seen.add(s)
                stack.append((s, iter(blocks[s - 1].succs)))
                break
        else:
            stack.pop()
            order.append(node)
    order.reverse()
    return order

def immediate_dominators(blocks: Sequence[BasicBlock]) -> Dict[int, Optional[int]]:
    rpo = reverse_postorder(blocks)
    if not rpo:
        return {}
    number = {b: n for n, b in enumerate(rpo)}
    preds: Dict[int, List[int]] = {b: [] for b in rpo}
    for b in rpo:
        for s in blocks[b - 1].succs:
            if b not in preds[s]:
                preds[s].append(b)

    idom: Dict[int, Optional[int]] = {rpo[0]: rpo[0]}

    def intersect(a: int, b: int) -> int:
        while a != b:
            while number[a] > number[b]:
                a = idom[a]
            while number[b] > number[a]:
                b = idom[b]
        return a

    changed = True
    while changed:
        changed = False
        for b in rpo[1:]:
            done = [p for p in preds[b] if p in idom]
            new = done[0]
            for p in done[1:]:
                new = intersect(p, new)
            if idom.get(b) != new:
                idom[b] = new
                changed = True
    idom[rpo[0]] = None
    return idom

def construct_domtree(blocks: Sequence[BasicBlock]) -> DominatorTree:
    idom = immediate_dominators(blocks)
    children: List[List[int]] = [[] for _ in blocks]
    for b in sorted(idom):
        parent = idom[b]
        if parent is not None:
            children[parent - 1].append(b)
    return domtree_from_children(children)
