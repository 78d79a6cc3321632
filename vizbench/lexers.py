from pygments import highlight, lex
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, bygroups
from pygments.token import Generic, Keyword, Name, Number, Operator, Punctuation, String, Text, Whitespace

class IRLexer(RegexLexer):
    """Lexer for the textual IR dump printed by ``codeviz show``."""
    name = "CodeViz IR"
    aliases = ["codeviz-ir"]
    filenames = []

    tokens = {
        "root": [
            (r"^(IRCodeView of|CFG of|Dominator tree for)(.*)$", bygroups(Generic.Heading, Generic.Heading)),
            (r"→|⇒", Operator),
            (r"#\d+", Name.Label),
            (r"%\d+", Name.Variable),
            (r"\b_\d+\b", Name.Variable.Magic),
            (r"\b(goto|if not|return|unreachable|enter|leave|pop_exception|detach|reattach|sync|within)\b",
             Keyword),
            (r"[A-Za-z_][A-Za-z0-9_]*(?=\()", Name.Function),
            (r"\d+(\.\d+)?", Number),
            (r"'[^'\n]*'|\"[^\"\n]*\"", String),
            (r"[(),=]", Punctuation),
            (r"\s+", Whitespace),
            (r".", Text),
        ],
    }

def highlight_ir(text: str) -> str:
    return highlight(text, IRLexer(), TerminalFormatter())

def ir_tokens(text: str):
    rows = []
    for ttype, value in lex(text, IRLexer()):
        if ttype is Whitespace:
            continue
        rows.append({"kind": str(ttype), "lexeme": value})
    return rows
