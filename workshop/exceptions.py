# File: workshop/exceptions.py
"""
Workshop - Error Taxonomy
==========================
Every error the scaffolding engine raises derives from ``ScaffoldError`` so
callers can catch the whole family at once, while the concrete classes let
them tell "pick another name" apart from "fix the environment".

    ScaffoldError
    ├── ModuleExistsError        target module directory already exists
    ├── InvalidNameError         a name cannot be turned into identifiers
    ├── InvalidDescriptorError   descriptor incomplete or inconsistent
    └── ArtifactWriteError       a directory or file could not be written
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""


class ModuleExistsError(ScaffoldError):
    """Raised when the target module directory is already present."""

    def __init__(self, module_name: str, path: Path) -> None:
        self.module_name: str = module_name
        self.path: Path = path
        super().__init__(f"Module [{module_name}] already exists at {path}.")


class InvalidNameError(ScaffoldError, ValueError):
    """Raised when an entity, value-object or module name is unparseable."""

    def __init__(self, name: str, reason: str) -> None:
        self.name: str = name
        self.reason: str = reason
        super().__init__(f"Invalid name {name!r}: {reason}")


class InvalidDescriptorError(ScaffoldError, ValueError):
    """Raised when a module descriptor is incomplete or self-contradictory."""

    def __init__(self, messages: Sequence[str]) -> None:
        self.messages: List[str] = list(messages)
        joined: str = "; ".join(self.messages) or "unknown problem"
        super().__init__(f"Invalid module descriptor: {joined}")


class ArtifactWriteError(ScaffoldError, OSError):
    """Raised when a generated artifact cannot be materialised on disk."""

    def __init__(self, path: Path, cause: Optional[OSError] = None) -> None:
        self.path: Path = path
        detail: str = f"{type(cause).__name__}: {cause}" if cause else "unknown error"
        super().__init__(f"Could not write {path} ({detail})")


__all__: List[str] = [
    "ScaffoldError",
    "ModuleExistsError",
    "InvalidNameError",
    "InvalidDescriptorError",
    "ArtifactWriteError",
]
