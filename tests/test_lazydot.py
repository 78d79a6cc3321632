import shutil
import subprocess

import pytest

from codeviz.config import VizConfig
from codeviz.ir import GotoNode, ReturnNode
from codeviz.lazydot import DotRenderError, dot_command, run_dot
from codeviz.view import IRCodeView

class FakeRun:
    def __init__(self, returncode=0, stdout=b"IMAGE", stderr=b""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls = []

    def __call__(self, cmd, input=None, capture_output=False):
        self.calls.append((cmd, input))
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)

@pytest.fixture
def view(make_cfg):
    cfg = make_cfg([GotoNode(2), ReturnNode(1)], [((1, 1), [2]), ((2, 2), [])])
    return IRCodeView(cfg, name="f", signature="(x)", rtype="int")

def test_dot_text_needs_no_process(view, monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("dot should not run")
    monkeypatch.setattr(subprocess, "run", boom)
    text = view.cfg().render("text/vnd.graphviz")
    assert text == view.cfg().source
    assert text.startswith('digraph "CFG of f on (x)" {')

@pytest.mark.parametrize("mime, flag", [
    ("image/png", "-Tpng"),
    ("image/svg+xml", "-Tsvg"),
    ("application/pdf", "-Tpdf"),
])
def test_image_formats_pipe_through_dot(view, monkeypatch, mime, flag):
    fake = FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    config = VizConfig(dot_command="/opt/gv/dot", fontname="monospace")
    assert view.cfg().render(mime, config) == b"IMAGE"
    (cmd, data), = fake.calls
    assert cmd == ["/opt/gv/dot", "-Gfontname=monospace", "-Nfontname=monospace",
                   "-Efontname=monospace", flag]
    assert data == view.cfg().source.encode("utf-8")

def test_each_render_starts_a_new_process(view, monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    graph = view.cfg_only()
    graph.pipe("png")
    graph.pipe("png")
    assert len(fake.calls) == 2

def test_unknown_media_type(view):
    with pytest.raises(ValueError):
        view.cfg().render("image/gif")
    with pytest.raises(ValueError):
        view.cfg().pipe("gif")

def test_nonzero_exit_raises(monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeRun(returncode=1, stdout=b"", stderr=b"syntax error in line 1"))
    with pytest.raises(DotRenderError) as excinfo:
        run_dot("digraph {", "png", VizConfig())
    assert excinfo.value.returncode == 1
    assert excinfo.value.stderr == "syntax error in line 1"
    assert "syntax error in line 1" in str(excinfo.value)

def test_missing_binary_raises(monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "dot")
    monkeypatch.setattr(subprocess, "run", missing)
    with pytest.raises(DotRenderError) as excinfo:
        run_dot("digraph {}", "svg", VizConfig(dot_command="no-such-dot"))
    assert excinfo.value.returncode is None
    assert "could not be started" in str(excinfo.value)

def test_save_picks_format_from_suffix(view, monkeypatch, tmp_path):
    fake = FakeRun(stdout=b"%PDF")
    monkeypatch.setattr(subprocess, "run", fake)
    pdf = view.cfg().save(tmp_path / "f.pdf")
    assert pdf.read_bytes() == b"%PDF"
    assert fake.calls[0][0][-1] == "-Tpdf"
    gv = view.cfg().save(tmp_path / "f.gv")
    assert gv.read_text(encoding="utf-8") == view.cfg().source
    with pytest.raises(ValueError):
        view.cfg().save(tmp_path / "f.bmp")

def test_mimebundle(view, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeRun(stdout=b"<svg/>"))
    assert view.cfg()._repr_mimebundle_() == {"image/svg+xml": "<svg/>"}
    bundle = view.cfg()._repr_mimebundle_(include=["text/vnd.graphviz", "text/html"])
    assert list(bundle) == ["text/vnd.graphviz"]

def test_config_from_env():
    assert VizConfig.from_env({}) == VizConfig("dot", "monospace")
    cfg = VizConfig.from_env({"CODEVIZ_DOT": "/usr/local/bin/dot", "CODEVIZ_FONTNAME": "Menlo"})
    assert cfg == VizConfig("/usr/local/bin/dot", "Menlo")
    assert cfg.with_overrides(dot_command=None, fontname="Iosevka").fontname == "Iosevka"
    assert dot_command("svg", cfg)[0] == "/usr/local/bin/dot"

@pytest.mark.skipif(shutil.which("dot") is None, reason="Graphviz is not installed")
@pytest.mark.parametrize("fmt, magic", [("svg", b"<svg"), ("png", b"\x89PNG"), ("pdf", b"%PDF")])
def test_real_dot_accepts_font_flags(view, fmt, magic):
    config = VizConfig(dot_command=shutil.which("dot"), fontname="monospace")
    data = view.cfg().pipe(fmt, config)
    assert magic in data
