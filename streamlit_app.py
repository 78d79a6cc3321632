# streamlit_app.py
import time, traceback, types
import streamlit as st

from codeviz.lazydot import DotRenderError
from vizbench.lexers import ir_tokens
from vizbench.pyir import ircode

# ---------- Tab indices ----------
TAB_IR     = 0
TAB_CFG    = 1
TAB_DOM    = 2
TAB_BC     = 3

DEFAULT_SOURCE = (
    "def collatz(n: int) -> int:\n"
    "    steps = 0\n"
    "    while n != 1:\n"
    "        if n % 2:\n"
    "            n = 3 * n + 1\n"
    "        else:\n"
    "            n //= 2\n"
    "        steps += 1\n"
    "    return steps\n"
)

# ---------- Helpers ----------
def timeit(fn):
    t0 = time.perf_counter()
    out = fn()
    return out, (time.perf_counter() - t0) * 1000.0  # ms

def load_functions(src: str):
    glb = {"__name__": "__codeviz__"}
    exec(compile(src, "<workbench>", "exec"), glb)
    return {k: v for k, v in glb.items() if isinstance(v, types.FunctionType)}

perf = {}  # collected timings

def perf_badge(*pairs):
    if not pairs:
        return
    cols = st.columns(len(pairs))
    for c, (label, ms) in zip(cols, pairs):
        with c:
            st.metric(label, f"{ms:.1f} ms")

def download(graph, label, key):
    try:
        svg = graph.pipe("svg")
    except DotRenderError as e:
        st.warning(f"SVG export unavailable: {e}")
        return
    st.download_button(label, svg, file_name=f"{key}.svg", mime="image/svg+xml", key=key)

# ---------- Page ----------
st.set_page_config(page_title="CodeViz Workbench", layout="wide")
st.title("CodeViz Workbench")
st.caption("Python function → bytecode IR → CFG → dominator tree")

with st.sidebar:
    st.header("Controls")
    src = st.text_area("Python source", value=DEFAULT_SOURCE, height=320)
    include_code = st.checkbox("Show statements in nodes", value=True)

try:
    funcs, t_load = timeit(lambda: load_functions(src))
    perf["load_ms"] = t_load
except Exception as e:
    st.error(f"Source error: {e}")
    st.code(traceback.format_exc())
    st.stop()

if not funcs:
    st.info("Define at least one function.")
    st.stop()

fname = st.sidebar.selectbox("Function", list(funcs.keys()))
view, t_ir = timeit(lambda: ircode(funcs[fname]))
perf["ir_ms"] = t_ir
tabs = st.tabs(["IR", "CFG", "Dominator tree", "Bytecode"])

# ---------- IR ----------
with tabs[TAB_IR]:
    st.subheader(view.summary())
    st.code(str(view), language="text")
    with st.expander("Tokens"):
        st.dataframe(ir_tokens(str(view)), hide_index=True, use_container_width=True)
    perf_badge(("Load", perf.get("load_ms", 0.0)), ("IR", perf.get("ir_ms", 0.0)))

# ---------- CFG ----------
with tabs[TAB_CFG]:
    cfg = view.cfg() if include_code else view.cfg_only()
    st.subheader(cfg.summary())
    src_dot, t_cfg = timeit(lambda: cfg.source)
    perf["cfg_ms"] = t_cfg
    st.graphviz_chart(src_dot)
    with st.expander("dot source"):
        st.code(src_dot, language="dot")
    download(cfg, "Download SVG", "cfg")
    perf_badge(("CFG", perf.get("cfg_ms", 0.0)))

# ---------- Dominator tree ----------
with tabs[TAB_DOM]:
    dom = view.dom() if include_code else view.dom_only()
    st.subheader(dom.summary())
    st.graphviz_chart(dom.source)
    st.code(str(dom), language="text")
    download(dom, "Download SVG", "dom")

# ---------- Bytecode ----------
with tabs[TAB_BC]:
    st.subheader("Bytecode")
    st.code(view.bytecode(), language="text")
