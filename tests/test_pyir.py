from codeviz.dot import block_tag, cfg_edges
from codeviz.ir import Expr, GotoIfNot, GotoNode, ReturnNode
from vizbench.pyir import cfg_from_code, ircode

def branchy(x):
    if x:
        return 1
    return 2

def looping(n: int) -> int:
    total = 0
    while n > 0:
        total += n
        n -= 1
    return total

def raising():
    raise ValueError("nope")

def terminators(cfg):
    return [cfg.terminator(i) for i in range(1, len(cfg.blocks) + 1)]

def test_branch_becomes_conditional_goto():
    cfg = cfg_from_code(branchy.__code__)
    assert len(cfg.blocks) >= 3
    assert any(isinstance(t, GotoIfNot) for t in terminators(cfg))
    returns = [t for t in terminators(cfg) if isinstance(t, ReturnNode)]
    assert len(returns) == 2
    assert all(r.has_value for r in returns)

def test_statements_cover_every_instruction():
    cfg = cfg_from_code(looping.__code__)
    covered = [s for bb in cfg.blocks for s in bb.stmts]
    assert covered == list(range(1, len(cfg.code) + 1))

def test_successors_point_at_goto_targets():
    cfg = cfg_from_code(looping.__code__)
    for i, bb in enumerate(cfg.blocks, start=1):
        term = cfg.terminator(i)
        if isinstance(term, GotoNode):
            assert bb.succs == (term.label,)
        elif isinstance(term, GotoIfNot):
            assert term.dest in bb.succs
        elif isinstance(term, ReturnNode):
            assert bb.succs == ()

def test_loop_has_back_edge():
    cfg = cfg_from_code(looping.__code__)
    assert any(s <= i for i, bb in enumerate(cfg.blocks, start=1) for s in bb.succs)

def test_raise_is_drawn_as_unreachable():
    cfg = cfg_from_code(raising.__code__)
    tags = [block_tag(cfg, i) for i in range(1, len(cfg.blocks) + 1)]
    assert any(t.endswith("⚠") for t in tags)

def test_plain_instructions_are_expressions():
    cfg = cfg_from_code(looping.__code__)
    names = [s.head for s in cfg.code if isinstance(s, Expr)]
    assert any(name.startswith("load_fast") for name in names)

def test_ircode_view():
    view = ircode(looping)
    assert view.name == "looping"
    assert view.signature == "(n: int)"
    assert view.rtype == "int"
    assert view.code is looping.__code__
    assert len(view.domtree.nodes) == len(view.ir.blocks)
    assert view.domtree.nodes[0].level == 1
    assert "LOAD_FAST" in view.bytecode()
    assert str(view).startswith("IRCodeView of looping with (n: int)\n")

def test_ircode_without_annotations():
    view = ircode(branchy)
    assert view.rtype == "Any"
    assert view.signature == "(x)"
    assert view.cfg().source.startswith('digraph "CFG of branchy on (x)" {')

def test_edges_never_point_outside():
    cfg = cfg_from_code(looping.__code__)
    n = len(cfg.blocks)
    for i in range(1, n + 1):
        for tail, head, _ in cfg_edges(cfg, i):
            assert tail == i and 1 <= head <= n
