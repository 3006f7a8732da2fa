# payroll_api/models/__init__.py
import importlib
import pkgutil
import pathlib

_SKIP = ("__pycache__",)

def load_all():
    """Import every model module (and subpackage) so db.metadata is complete."""
    pkg_path = pathlib.Path(__file__).parent

    def _walk(pkg_name: str, path: pathlib.Path):
        for mod in pkgutil.iter_modules([str(path)]):
            if mod.name in _SKIP:
                continue
            full = f"{pkg_name}.{mod.name}"
            importlib.import_module(full)
            if mod.ispkg:
                _walk(full, path / mod.name)

    _walk(__name__, pkg_path)
