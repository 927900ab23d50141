"""Destinations for generated modules."""

from pathlib import Path
from typing import Protocol


class OutputSink(Protocol):
    """Receives one rendered module per processed definition."""

    def emit(self, package: str, module_name: str, body: str) -> None: ...


class DirectorySink:
    """Writes modules below a root directory.

    Modules land in a directory tree mirroring their package unless flat is
    set, in which case they are all written directly to root.
    """

    def __init__(self, root: str | Path, flat: bool = False) -> None:
        self.root = Path(root)
        self.flat = flat
        self.written: list[Path] = []

    def path_for(self, package: str, module_name: str) -> Path:
        directory = self.root
        if package and not self.flat:
            directory = directory.joinpath(*package.split("."))
        return directory / f"{module_name}.py"

    def emit(self, package: str, module_name: str, body: str) -> None:
        path = self.path_for(package, module_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
        self.written.append(path)


class MemorySink:
    """Keeps rendered modules in memory, keyed by qualified module name."""

    def __init__(self) -> None:
        self.modules: dict[str, str] = {}

    def emit(self, package: str, module_name: str, body: str) -> None:
        key = f"{package}.{module_name}" if package else module_name
        self.modules[key] = body
