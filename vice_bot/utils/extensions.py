import importlib
import inspect
import pkgutil
from collections.abc import Iterator

from vice_bot import exts


def _on_walk_error(name: str) -> None:
    raise ImportError(name=name)


def walk_extensions() -> Iterator[str]:
    """Yield the dotted names of every loadable extension under ``vice_bot.exts``.

    Modules and packages whose name starts with an underscore are private helpers
    and are skipped. Packages only count as extensions if they define ``setup``.
    """
    for module in pkgutil.walk_packages(exts.__path__, f"{exts.__name__}.", onerror=_on_walk_error):
        if module.name.rsplit(".", maxsplit=1)[-1].startswith("_"):
            continue

        if module.ispkg:
            imported = importlib.import_module(module.name)
            if not inspect.isfunction(getattr(imported, "setup", None)):
                continue

        yield module.name
