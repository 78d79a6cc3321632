import os
from dataclasses import dataclass, replace

@dataclass(frozen=True)
class VizConfig:
    dot_command: str = "dot"        # Graphviz layout binary
    fontname: str = "monospace"     # graph, node and edge font

    @classmethod
    def from_env(cls, environ=None) -> "VizConfig":
        env = os.environ if environ is None else environ
        default = cls()
        return cls(
            dot_command=env.get("CODEVIZ_DOT") or default.dot_command,
            fontname=env.get("CODEVIZ_FONTNAME") or default.fontname,
        )

    def with_overrides(self, **changes) -> "VizConfig":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

CONFIG = VizConfig.from_env()
