"""IR provider backed by CPython bytecode.

Instructions become statements (numbered from 1 in bytecode order), leaders
split them into basic blocks, and jumps, returns and exception setup become
the terminators the visualizers know about.
"""
import dis
import inspect
import logging
from types import CodeType
from typing import Dict, List, Optional, Set

from codeviz.ir import BasicBlock, ControlFlowGraph, Expr, GotoIfNot, GotoNode, ReturnNode, with_preds
from codeviz.view import IRCodeView

from .dominance import construct_domtree

logger = logging.getLogger(__name__)

JUMP_OPS = set().union(*(getattr(dis, name, ()) for name in ("hasjump", "hasjrel", "hasjabs")))
UNCONDITIONAL_JUMPS = {
    "JUMP", "JUMP_FORWARD", "JUMP_BACKWARD", "JUMP_ABSOLUTE",
    "JUMP_NO_INTERRUPT", "JUMP_BACKWARD_NO_INTERRUPT",
}
RETURNS = {"RETURN_VALUE", "RETURN_CONST"}
RAISES = {"RAISE_VARARGS", "RERAISE"}
ENTERS = {"SETUP_FINALLY", "SETUP_WITH", "SETUP_ASYNC_WITH", "SETUP_EXCEPT"}

# what has to be false for a conditional jump to be taken
JUMP_CONDITIONS = {
    "POP_JUMP_IF_FALSE": "TOS",
    "POP_JUMP_FORWARD_IF_FALSE": "TOS",
    "POP_JUMP_BACKWARD_IF_FALSE": "TOS",
    "JUMP_IF_FALSE_OR_POP": "TOS",
    "POP_JUMP_IF_TRUE": "not TOS",
    "POP_JUMP_FORWARD_IF_TRUE": "not TOS",
    "POP_JUMP_BACKWARD_IF_TRUE": "not TOS",
    "JUMP_IF_TRUE_OR_POP": "not TOS",
    "POP_JUMP_IF_NONE": "TOS is not None",
    "POP_JUMP_FORWARD_IF_NONE": "TOS is not None",
    "POP_JUMP_BACKWARD_IF_NONE": "TOS is not None",
    "POP_JUMP_IF_NOT_NONE": "TOS is None",
    "POP_JUMP_FORWARD_IF_NOT_NONE": "TOS is None",
    "POP_JUMP_BACKWARD_IF_NOT_NONE": "TOS is None",
    "FOR_ITER": "next(TOS)",
}

def _kind(ins: dis.Instruction) -> Optional[str]:
    name = ins.opname
    if name in ENTERS:
        return "enter"
    if name == "POP_BLOCK":
        return "leave"
    if name in RETURNS:
        return "return"
    if name in RAISES:
        return "raise"
    if ins.opcode in JUMP_OPS:
        return "goto" if name in UNCONDITIONAL_JUMPS else "cond"
    return None

def _leaders(instrs: List[dis.Instruction], handlers: Set[int]) -> List[int]:
    offsets = {ins.offset for ins in instrs}
    leaders = {instrs[0].offset}
    leaders |= {h for h in handlers if h in offsets}
    for i, ins in enumerate(instrs):
        kind = _kind(ins)
        if kind is None:
            continue
        if kind in ("enter", "goto", "cond") and ins.argval in offsets:
            leaders.add(ins.argval)
        if i + 1 < len(instrs):
            leaders.add(instrs[i + 1].offset)
    return sorted(leaders)

def _statement(ins: dis.Instruction, block_of: Dict[int, int]):
    kind = _kind(ins)
    target = block_of.get(ins.argval) if kind in ("enter", "goto", "cond") else None
    if kind == "goto" and target is not None:
        return GotoNode(target)
    if kind == "cond" and target is not None:
        return GotoIfNot(JUMP_CONDITIONS.get(ins.opname, ins.opname.lower()), target)
    if kind == "return":
        return ReturnNode(ins.argval if ins.opname == "RETURN_CONST" else "TOS")
    if kind == "raise":
        return ReturnNode()
    if kind == "enter" and target is not None:
        return Expr("enter", (target,))
    if kind == "leave":
        return Expr("leave")
    if ins.opname == "POP_EXCEPT":
        return Expr("pop_exception")
    return Expr(ins.opname.lower(), (ins.argrepr,) if ins.argrepr else ())

def cfg_from_code(code: CodeType) -> ControlFlowGraph:
    bc = dis.Bytecode(code)
    instrs = list(bc)
    if not instrs:
        return ControlFlowGraph(blocks=(), code=())
    handlers = {e.target for e in getattr(bc, "exception_entries", ())}
    leaders = _leaders(instrs, handlers)
    block_of = {off: n for n, off in enumerate(leaders, start=1)}

    position = {ins.offset: i for i, ins in enumerate(instrs, start=1)}
    starts = [position[off] for off in leaders] + [len(instrs) + 1]
    blocks: List[BasicBlock] = []
    for n, (first, stop) in enumerate(zip(starts, starts[1:]), start=1):
        last = instrs[stop - 2]
        kind = _kind(last)
        target = block_of.get(last.argval) if kind in ("enter", "goto", "cond") else None
        fall = [n + 1] if n < len(leaders) else []
        if kind == "goto":
            succs = [target] if target is not None else []
        elif kind in ("cond", "enter"):
            succs = fall + ([target] if target is not None else [])
        elif kind in ("return", "raise"):
            succs = []
        else:
            succs = fall
        blocks.append(BasicBlock(range(first, stop), tuple(dict.fromkeys(succs))))

    stmts = tuple(_statement(ins, block_of) for ins in instrs)
    cfg = ControlFlowGraph(blocks=with_preds(blocks), code=stmts).validate()
    logger.debug("%s: %d instructions in %d blocks", code.co_name, len(instrs), len(blocks))
    return cfg

def ircode(func) -> IRCodeView:
    """Read the bytecode of ``func`` (a function, method or code object)."""
    if isinstance(func, CodeType):
        code, name, signature, rtype = func, func.co_name, "(?)", None
    else:
        func = inspect.unwrap(getattr(func, "__func__", func))
        code = func.__code__
        name = getattr(func, "__qualname__", code.co_name)
        sig = inspect.signature(func)
        if sig.return_annotation is inspect.Signature.empty:
            rtype = "Any"
        else:
            rtype = inspect.formatannotation(sig.return_annotation)
        signature = str(sig.replace(return_annotation=inspect.Signature.empty))
    cfg = cfg_from_code(code)
    return IRCodeView(cfg, name=name, signature=signature, rtype=rtype,
                      domtree=construct_domtree(cfg.blocks), code=code)
