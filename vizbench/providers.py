import importlib
import importlib.util
import pathlib

from codeviz.view import IRCodeView

from . import jsonir, pyir

class TargetError(Exception): pass

def _import(module: str):
    path = pathlib.Path(module)
    if path.suffix == ".py":
        if not path.is_file():
            raise TargetError(f"No such file: {module}")
        spec = importlib.util.spec_from_file_location(path.stem, path)
        mod = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(mod)
        return mod
    try:
        return importlib.import_module(module)
    except ImportError as e:
        raise TargetError(f"Cannot import {module}: {e}") from e

def resolve_function(target: str):
    module, sep, qualname = target.rpartition(":")
    if not sep or not module or not qualname:
        raise TargetError(f"Expected module:function or file.py:function, got {target!r}")
    obj = _import(module)
    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise TargetError(f"{module} has no attribute {qualname}") from e
    return obj

def load_view(target: str) -> IRCodeView:
    """IR for ``target``: a ``.json`` IR document or ``module:function``."""
    if target.endswith(".json"):
        return jsonir.load(target)
    func = resolve_function(target)
    if not hasattr(getattr(func, "__func__", func), "__code__"):
        raise TargetError(f"{target} is not a Python function")
    return pyir.ircode(func)
