import argparse, logging, pathlib, sys

from codeviz.config import CONFIG
from codeviz.ir import IRError
from codeviz.lazydot import SUFFIX_FORMATS, DotRenderError

from .jsonir import IRLoadError
from .lexers import highlight_ir
from .providers import TargetError, load_view

FORMATS = ("dot", "png", "svg", "pdf")

def _write(data, out):
    if out:
        path = pathlib.Path(out)
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_bytes(data)
    elif isinstance(data, str):
        sys.stdout.write(data)
    else:
        sys.stdout.buffer.write(data)

def _graph(view, args):
    if args.cmd == "cfg":
        return view.cfg() if args.code else view.cfg_only()
    return view.dom() if args.code else view.dom_only()

def _format(args) -> str:
    if args.format:
        return args.format
    if args.output:
        return SUFFIX_FORMATS.get(pathlib.Path(args.output).suffix.lower(), "dot")
    return "dot"

def run(args) -> int:
    view = load_view(args.target)
    if args.cmd == "show":
        text = str(view)
        _write(highlight_ir(text) if args.color else text, None)
    elif args.cmd == "domtree":
        _write(str(view.dom()) + "\n", None)
    elif args.cmd == "bytecode":
        _write(view.bytecode(), None)
    else:
        config = CONFIG.with_overrides(dot_command=args.dot, fontname=args.font)
        _write(_graph(view, args).pipe(_format(args), config), args.output)
    return 0

def main(argv=None):
    ap = argparse.ArgumentParser(prog="codeviz", description="Render compiled IR as text and Graphviz diagrams")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log debug messages to stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    showp = sub.add_parser("show", help="Print the IR as text")
    showp.add_argument("target", help="module:function, file.py:function or an IR .json file")
    showp.add_argument("--color", action="store_true", help="Highlight for the terminal")

    for name, what in (("cfg", "control-flow graph"), ("dom", "dominator tree")):
        p = sub.add_parser(name, help=f"Render the {what}")
        p.add_argument("target", help="module:function, file.py:function or an IR .json file")
        p.add_argument("--no-code", dest="code", action="store_false", help="Show statements as tooltips only")
        p.add_argument("-T", "--format", choices=FORMATS, help="Output format (default: from -o, else dot)")
        p.add_argument("-o", "--output", help="Write to this file instead of stdout")
        p.add_argument("--dot", help=f"Graphviz binary (default: {CONFIG.dot_command})")
        p.add_argument("--font", help=f"Font for the diagram (default: {CONFIG.fontname})")

    treep = sub.add_parser("domtree", help="Print the dominator tree as text")
    treep.add_argument("target", help="module:function, file.py:function or an IR .json file")

    bcp = sub.add_parser("bytecode", help="Print the Python bytecode the IR was read from")
    bcp.add_argument("target", help="module:function or file.py:function")

    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        return run(args)
    except (TargetError, IRLoadError, IRError, DotRenderError, ValueError) as e:
        print(f"codeviz: error: {e}", file=sys.stderr)
        return 1

if __name__ == '__main__':
    sys.exit(main())
