from dataclasses import dataclass, field
from typing import List, Tuple

@dataclass(frozen=True)
class DomTreeNode:
    level: int = 1                               # depth in the tree, entry block is 1, unreachable 0
    children: Tuple[int, ...] = field(default_factory=tuple)

@dataclass(frozen=True)
class DominatorTree:
    nodes: Tuple[DomTreeNode, ...]

    def __getitem__(self, i: int) -> DomTreeNode:
        return self.nodes[i - 1]

    def __len__(self):
        return len(self.nodes)

def domtree_from_children(children: List[List[int]]) -> DominatorTree:
    """Build a tree from per-block child lists, rooted at block 1."""
    levels = [0] * len(children)
    if children:
        levels[0] = 1
        stack = [1]
        while stack:
            i = stack.pop()
            for c in children[i - 1]:
                if levels[c - 1]:
                    continue
                levels[c - 1] = levels[i - 1] + 1
                stack.append(c)
    return DominatorTree(tuple(DomTreeNode(lv, tuple(ch)) for lv, ch in zip(levels, children)))

def _tree_lines(tree: DominatorTree, i: int, prefix: str, is_last: bool, root: bool) -> List[str]:
    lines = [str(i) if root else f"{prefix}{'└─ ' if is_last else '├─ '}{i}"]
    new_prefix = "" if root else f"{prefix}{'   ' if is_last else '│  '}"
    kids = tree[i].children
    for n, c in enumerate(kids):
        lines.extend(_tree_lines(tree, c, new_prefix, n == len(kids) - 1, False))
    return lines

def domtree_ascii(tree: DominatorTree) -> str:
    if not tree.nodes:
        return ""
    return "\n".join(_tree_lines(tree, 1, "", True, True))
