"""Graph values that run Graphviz only when an output format is asked for.

A :class:`LazyDot` keeps the immutable inputs of a graph and builds the dot
text on each request. Image formats are produced by piping that text through
the ``dot`` binary; every call starts a new process.
"""
import logging
import pathlib
import subprocess
from typing import Dict, Iterable, List, Optional

from graphviz import Digraph

from . import config as _config
from .config import VizConfig

logger = logging.getLogger(__name__)

# https://www.iana.org/assignments/media-types/text/vnd.graphviz
DOT_MIME = "text/vnd.graphviz"
MIME_FORMATS: Dict[str, Optional[str]] = {
    DOT_MIME: None,
    "image/png": "png",
    "image/svg+xml": "svg",
    "application/pdf": "pdf",
}
FORMAT_MIMES = {"dot": DOT_MIME, "png": "image/png", "svg": "image/svg+xml", "pdf": "application/pdf"}
SUFFIX_FORMATS = {".dot": "dot", ".gv": "dot", ".png": "png", ".svg": "svg", ".pdf": "pdf"}

class DotRenderError(RuntimeError):
    def __init__(self, cmd: List[str], returncode: Optional[int], stderr: str):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        status = "could not be started" if returncode is None else f"exited with status {returncode}"
        msg = f"{cmd[0]} {status}"
        if stderr.strip():
            msg += f": {stderr.strip()}"
        super().__init__(msg)

def dot_command(fmt: str, config: Optional[VizConfig] = None) -> List[str]:
    cfg = config or _config.CONFIG
    font = cfg.fontname
    return [cfg.dot_command, f"-Gfontname={font}", f"-Nfontname={font}", f"-Efontname={font}", f"-T{fmt}"]

def run_dot(source: str, fmt: str, config: Optional[VizConfig] = None) -> bytes:
    cmd = dot_command(fmt, config)
    logger.debug("Run: %s", " ".join(cmd))
    try:
        out = subprocess.run(cmd, input=source.encode("utf-8"), capture_output=True)
    except OSError as e:
        raise DotRenderError(cmd, None, str(e)) from e
    if out.returncode != 0:
        raise DotRenderError(cmd, out.returncode, out.stderr.decode("utf-8", errors="replace"))
    return out.stdout

class LazyDot:
    def digraph(self) -> Digraph:
        raise NotImplementedError

    def summary(self) -> str:
        raise NotImplementedError

    @property
    def source(self) -> str:
        return self.digraph().source

    def render(self, mime: str = DOT_MIME, config: Optional[VizConfig] = None):
        """Return the dot text for ``text/vnd.graphviz``, image bytes otherwise."""
        if mime not in MIME_FORMATS:
            raise ValueError(f"Unsupported media type: {mime} (expected one of {', '.join(MIME_FORMATS)})")
        fmt = MIME_FORMATS[mime]
        if fmt is None:
            return self.source
        return run_dot(self.source, fmt, config)

    def pipe(self, fmt: str = "svg", config: Optional[VizConfig] = None):
        if fmt not in FORMAT_MIMES:
            raise ValueError(f"Unsupported format: {fmt}")
        return self.render(FORMAT_MIMES[fmt], config)

    def save(self, path, config: Optional[VizConfig] = None) -> pathlib.Path:
        path = pathlib.Path(path)
        fmt = SUFFIX_FORMATS.get(path.suffix.lower())
        if fmt is None:
            raise ValueError(f"Cannot tell the output format of {path.name}; use one of {', '.join(SUFFIX_FORMATS)}")
        data = self.pipe(fmt, config)
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_bytes(data)
        return path

    def _repr_mimebundle_(self, include: Optional[Iterable[str]] = None,
                          exclude: Optional[Iterable[str]] = None):
        wanted = list(include) if include else ["image/svg+xml"]
        skip = set(exclude or ())
        bundle = {}
        for mime in wanted:
            if mime in MIME_FORMATS and mime not in skip:
                data = self.render(mime)
                bundle[mime] = data.decode("utf-8") if mime == "image/svg+xml" else data
        return bundle

    def __str__(self):
        return self.summary()
