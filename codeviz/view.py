from __future__ import annotations
from dataclasses import dataclass
from types import CodeType
from typing import Any, Optional

from graphviz import Digraph

from .dot import cfg_graphviz, domtree_graphviz
from .domtree import DominatorTree, domtree_ascii
from .ir import ControlFlowGraph, IRError, pretty_ir
from .lazydot import LazyDot

@dataclass(frozen=True)
class IRCodeView:
    ir: ControlFlowGraph
    name: str = "f?"
    signature: str = "(?)"
    rtype: Any = None
    domtree: Optional[DominatorTree] = None
    code: Optional[CodeType] = None    # Python code object the IR was read from, if any

    def summary(self) -> str:
        return f"IRCodeView of {self.name} with {self.signature}"

    def __str__(self):
        return "\n".join([self.summary(), pretty_ir(self.ir), f"⇒ {self.rtype}"]) + "\n"

    # visualizers
    def cfg(self) -> "CFGDot":
        return CFGDot(self, True)

    def cfg_only(self) -> "CFGDot":
        return CFGDot(self, False)

    def dom(self) -> "DomTreeDot":
        return DomTreeDot(self, True)

    def dom_only(self) -> "DomTreeDot":
        return DomTreeDot(self, False)

    # other representations
    def bytecode(self) -> str:
        if self.code is None:
            raise IRError(f"{self.name} was not read from Python bytecode")
        import dis
        return dis.Bytecode(self.code).dis()

@dataclass(frozen=True)
class CFGDot(LazyDot):
    view: IRCodeView
    include_code: bool = True

    def summary(self) -> str:
        return f"CFG of {self.view.name} on {self.view.signature}"

    def digraph(self) -> Digraph:
        return cfg_graphviz(self.view.ir, self.summary(), self.include_code)

@dataclass(frozen=True)
class DomTreeDot(LazyDot):
    view: IRCodeView
    include_code: bool = True

    @property
    def domtree(self) -> DominatorTree:
        if self.view.domtree is None:
            raise IRError(f"no dominator tree was provided for {self.view.name}")
        return self.view.domtree

    def summary(self) -> str:
        return f"Dominator tree for {self.view.name} on {self.view.signature}"

    def digraph(self) -> Digraph:
        return domtree_graphviz(self.view.ir, self.domtree, self.summary(), self.include_code)

    def __str__(self):
        return self.summary() + "\n" + domtree_ascii(self.domtree)
