from .ir import Expr, GotoIfNot, GotoNode

# https://graphviz.org/doc/info/attrs.html#k:escString
DOT_SPECIAL = '\\{}<>|"\n'

def escape_dot_label(text: str) -> str:
    return "".join("\\" + c if c in DOT_SPECIAL else c for c in str(text))

def format_stmt(stmt) -> str:
    if isinstance(stmt, GotoIfNot):
        return f"goto #{stmt.dest} if not {stmt.cond}"
    if isinstance(stmt, GotoNode):
        return f"goto #{stmt.label}"
    if isinstance(stmt, Expr):
        if stmt.head == "enter" and len(stmt.args) == 1:
            return f"enter #{stmt.args[0]}"
        if stmt.head in ("leave", "pop_exception"):
            return " ".join([stmt.head] + [str(a) for a in stmt.args])
    return str(stmt)

def stmt_line(index: int, stmt) -> str:
    return f"%{index} = {format_stmt(stmt)}"
