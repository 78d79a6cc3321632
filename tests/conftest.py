import pytest

from codeviz.ir import BasicBlock, ControlFlowGraph, with_preds

def build_cfg(code, blocks):
    """``blocks`` is a list of ((first, last), succs) with inclusive statement ranges."""
    bbs = [BasicBlock(range(first, last + 1), tuple(succs)) for (first, last), succs in blocks]
    return ControlFlowGraph(blocks=with_preds(bbs), code=tuple(code)).validate()

@pytest.fixture
def make_cfg():
    return build_cfg
