from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Tuple, Union

class IRError(Exception): pass

@dataclass(frozen=True)
class SSAValue:
    id: int
    def __str__(self):
        return f"%{self.id}"

@dataclass(frozen=True)
class Argument:
    n: int
    def __str__(self):
        return f"_{self.n}"

class _Undef:
    def __repr__(self):
        return "UNDEF"

UNDEF = _Undef()   # marks a return without a value (unreachable path)

# ---------- statements ----------
@dataclass(frozen=True)
class GotoNode:
    label: int
    def __str__(self):
        return f"goto #{self.label}"

@dataclass(frozen=True)
class GotoIfNot:
    cond: Any
    dest: int
    def __str__(self):
        return f"goto #{self.dest} if not {self.cond}"

@dataclass(frozen=True)
class ReturnNode:
    val: Any = UNDEF

    @property
    def has_value(self) -> bool:
        return self.val is not UNDEF

    def __str__(self):
        return f"return {self.val}" if self.has_value else "unreachable"

@dataclass(frozen=True)
class Expr:
    head: str                       # e.g. 'call', 'enter', 'leave', 'pop_exception', 'syncregion'
    args: Tuple[Any, ...] = ()
    def __str__(self):
        return f"{self.head}(" + ", ".join(str(a) for a in self.args) + ")"

# fork/join markers; `label` is the continuation block for detach,
# the join block for reattach
@dataclass(frozen=True)
class DetachNode:
    syncregion: Any
    label: int
    def __str__(self):
        return f"detach within {self.syncregion}, #{self.label}"

@dataclass(frozen=True)
class ReattachNode:
    syncregion: Any
    label: int
    def __str__(self):
        return f"reattach within {self.syncregion}, #{self.label}"

@dataclass(frozen=True)
class SyncNode:
    syncregion: Any
    def __str__(self):
        return f"sync within {self.syncregion}"

ControlNode = Union[GotoNode, GotoIfNot, ReturnNode, Expr, DetachNode, ReattachNode, SyncNode]
# a statement is a ControlNode or a plain value (constant, SSAValue, Argument)
Statement = object

# ---------- graph ----------
@dataclass(frozen=True)
class BasicBlock:
    stmts: range                              # 1-based statement indices, last one is the terminator
    succs: Tuple[int, ...] = ()
    preds: Tuple[int, ...] = ()

@dataclass(frozen=True)
class ControlFlowGraph:
    blocks: Tuple[BasicBlock, ...]
    code: Tuple[Statement, ...] = field(default_factory=tuple)

    def stmt(self, i: int) -> Statement:
        return self.code[i - 1]

    def block(self, i: int) -> BasicBlock:
        return self.blocks[i - 1]

    def terminator(self, i: int) -> Statement:
        return self.stmt(self.block(i).stmts[-1])

    def validate(self) -> "ControlFlowGraph":
        n = len(self.blocks)
        for i, bb in enumerate(self.blocks, start=1):
            if len(bb.stmts) == 0:
                raise IRError(f"block #{i} has no statements")
            if bb.stmts[0] < 1 or bb.stmts[-1] > len(self.code):
                raise IRError(f"block #{i} statements {bb.stmts.start}:{bb.stmts.stop - 1} "
                              f"outside of a {len(self.code)}-statement table")
            for s in bb.succs:
                if not 1 <= s <= n:
                    raise IRError(f"block #{i} has successor #{s}, graph has {n} blocks")
        return self

def with_preds(blocks: List[BasicBlock]) -> Tuple[BasicBlock, ...]:
    preds: List[List[int]] = [[] for _ in blocks]
    for i, bb in enumerate(blocks, start=1):
        for s in bb.succs:
            if 1 <= s <= len(blocks) and i not in preds[s - 1]:
                preds[s - 1].append(i)
    return tuple(BasicBlock(bb.stmts, tuple(bb.succs), tuple(p)) for bb, p in zip(blocks, preds))

def pretty_ir(cfg: ControlFlowGraph) -> str:
    from .labels import stmt_line
    lines = []
    for i, bb in enumerate(cfg.blocks, start=1):
        succs = ", ".join(f"#{s}" for s in bb.succs)
        lines.append(f"#{i}" + (f" → {succs}" if succs else ""))
        for s in bb.stmts:
            lines.append("  " + stmt_line(s, cfg.stmt(s)))
    return "\n".join(lines)
