# File: workshop/exporters.py
"""
Workshop - Module Exporter (File-System Manager)
=================================================

Responsible for:
    1. Creating the module root directory, refusing to reuse an existing one.
    2. Writing every planned artifact (write-to-temp then rename).
    3. Recording a checksum manifest of what was written.

Failures are not collected: the first directory or file that cannot be
written raises ``ArtifactWriteError`` and the export stops there.  Files
already written stay on disk; there is no rollback.

Complexity: O(F) where F = number of artifacts in the plan.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from workshop.exceptions import ArtifactWriteError, ModuleExistsError
from workshop.models import Artifact, ArtifactPlan
from workshop.utils import Timer, count_lines, ensure_directory, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("workshop.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """Everything written for one module, serialisable to JSON."""

    module_name: str = ""
    module_path: str = ""
    export_timestamp: str = ""
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    def paths(self) -> List[str]:
        return [f.relative_path for f in self.files]

    def to_dict(self) -> Dict[str, Any]:
        """Convert manifest to a JSON-serialisable dictionary."""
        return {
            "module_name": self.module_name,
            "module_path": self.module_path,
            "export_timestamp": self.export_timestamp,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        """Serialise manifest to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Returned by ``ModuleExporter.export()`` once every artifact is on disk."""

    manifest: ExportManifest
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# ModuleExporter class
# ---------------------------------------------------------------------------


class ModuleExporter:
    """
    Writes an ``ArtifactPlan`` below a fresh module directory.

    Usage::

        exporter = ModuleExporter(Path("Modules/Blog"))
        result = exporter.export(plan)
        print(result.manifest.to_json())

    Thread-safety: NOT thread-safe.  Use one exporter per module directory.
    """

    def __init__(self, module_root: Path, *, atomic_writes: bool = True) -> None:
        """
        Args:
            module_root: Directory that will hold the module; must not exist.
            atomic_writes: If True, use write-to-temp+rename per file.
        """
        self._module_root: Path = Path(module_root)
        self._atomic_writes: bool = atomic_writes
        self._file_records: List[FileRecord] = []

        logger.debug(
            "ModuleExporter initialised: module_root=%s, atomic=%s.",
            self._module_root,
            self._atomic_writes,
        )

    @property
    def module_root(self) -> Path:
        return self._module_root

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, plan: ArtifactPlan) -> ExportResult:
        """
        Create the module directory and write every artifact of *plan*.

        Raises:
            ModuleExistsError: If the module directory appeared before it
                could be created.
            ArtifactWriteError: If a directory or file cannot be written.
        """
        self._file_records = []

        with Timer("export") as timer:
            self._create_module_root(plan.module_name)
            for artifact in plan.artifacts:
                self._file_records.append(self._write_artifact(artifact))

        manifest: ExportManifest = self._build_manifest(plan.module_name)
        logger.info(
            "Export completed: %d files, %d bytes, %.3fs.",
            manifest.total_files,
            manifest.total_bytes,
            timer.elapsed,
        )
        return ExportResult(manifest=manifest, elapsed_seconds=timer.elapsed)

    # -----------------------------------------------------------------
    # Internal: directory management
    # -----------------------------------------------------------------

    def _create_module_root(self, module_name: str) -> None:
        """Create the parent tree, then the module directory itself exclusively."""
        try:
            ensure_directory(self._module_root.parent)
        except OSError as exc:
            logger.error("Failed to create modules root %s: %s", self._module_root.parent, exc)
            raise ArtifactWriteError(self._module_root.parent, exc) from exc

        try:
            self._module_root.mkdir(exist_ok=False)
        except FileExistsError:
            logger.error("Module directory appeared concurrently: %s", self._module_root)
            raise ModuleExistsError(module_name, self._module_root) from None
        except OSError as exc:
            logger.error("Failed to create module directory %s: %s", self._module_root, exc)
            raise ArtifactWriteError(self._module_root, exc) from exc

        logger.debug("Created module directory: %s", self._module_root)

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    def _write_artifact(self, artifact: Artifact) -> FileRecord:
        full_path: Path = self._module_root / artifact.path
        try:
            size_bytes: int = write_file(
                full_path, artifact.content, atomic=self._atomic_writes
            )
        except OSError as exc:
            logger.error(
                "Failed to write %s: %s: %s", artifact.path, type(exc).__name__, exc
            )
            raise ArtifactWriteError(full_path, exc) from exc

        return FileRecord(
            relative_path=artifact.path,
            absolute_path=str(full_path),
            size_bytes=size_bytes,
            line_count=count_lines(artifact.content),
            sha256=sha256_hex(artifact.content),
        )

    # -----------------------------------------------------------------
    # Internal: manifest
    # -----------------------------------------------------------------

    def _build_manifest(self, module_name: str) -> ExportManifest:
        return ExportManifest(
            module_name=module_name,
            module_path=str(self._module_root),
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            files=list(self._file_records),
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModuleExporter",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
]

logger.debug("workshop.exporters loaded.")
