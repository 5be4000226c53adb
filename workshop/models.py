# File: workshop/models.py
"""
Workshop - Core Data Models
============================
Pydantic V2 models shared by the whole pipeline:

    ModuleDescriptor → ArtifactPlanner → ArtifactPlan → ModuleExporter

- ``PersistenceStrategy``  closed set of repository/migration families.
- ``ModuleDescriptor``     what to scaffold (immutable once built).
- ``ScaffoldConfig``       where and how to scaffold it.
- ``Artifact`` / ``ArtifactPlan``  the rendered files, keyed by relative path.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("workshop.models")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class PersistenceStrategy(str, Enum):
    """Repository / migration implementation family."""

    ELOQUENT = "Eloquent"
    DOCTRINE = "Doctrine"

    @classmethod
    def from_label(cls, label: Any) -> "PersistenceStrategy":
        """Accept an enum member or a case-insensitive label (``"eloquent"``)."""
        if isinstance(label, cls):
            return label
        text: str = str(label).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        allowed: str = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown entity type {label!r}; expected one of: {allowed}.")


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Module descriptor
# ---------------------------------------------------------------------------


class ModuleDescriptor(BaseModel):
    """
    Immutable description of one module to scaffold.

    ``name`` is kept exactly as given: it becomes the PHP namespace segment
    and the module directory name.  ``vendor`` only feeds identifiers such as
    the composer package name.
    """

    model_config = _FROZEN_CONFIG

    vendor: str = Field(..., min_length=1, description="Composer vendor.")
    name: str = Field(..., min_length=1, description="Module name, e.g. 'Blog'.")
    entity_type: PersistenceStrategy = Field(
        ...,
        alias="entityType",
        description="Persistence strategy for repositories and migrations.",
    )
    entities: Tuple[str, ...] = Field(
        default_factory=tuple, description="Singular entity names, fan-out order."
    )
    value_objects: Tuple[str, ...] = Field(
        default_factory=tuple,
        alias="valueObjects",
        description="Value-object names.",
    )

    @field_validator("vendor", "name")
    @classmethod
    def _strip(cls, v: str) -> str:
        stripped: str = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("entity_type", mode="before")
    @classmethod
    def _parse_strategy(cls, v: Any) -> PersistenceStrategy:
        return PersistenceStrategy.from_label(v)

    @field_validator("entities", "value_objects", mode="before")
    @classmethod
    def _coerce_names(cls, v: Any) -> Tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, str):
            raise ValueError("expected a list of names, got a single string")
        return tuple(str(item).strip() for item in v)

    @property
    def strategy(self) -> PersistenceStrategy:
        return self.entity_type


# ---------------------------------------------------------------------------
# Scaffold configuration
# ---------------------------------------------------------------------------


class ScaffoldConfig(BaseModel):
    """
    Environment-level settings for the scaffolder.

    One instance can serve many ``scaffold()`` calls; nothing in it is
    specific to a single module.
    """

    model_config = _SHARED_CONFIG

    # -- Output -------------------------------------------------------------
    modules_root: Path = Field(
        default=Path("Modules"),
        description="Directory under which each module gets its own folder.",
    )
    atomic_writes: bool = Field(
        default=True, description="Write via temp file + rename."
    )

    # -- Rendering ----------------------------------------------------------
    stubs_dir: Optional[Path] = Field(
        default=None,
        description="Alternative directory of .j2 stubs (defaults to the packaged set).",
    )
    language: str = Field(
        default="en",
        min_length=2,
        max_length=8,
        description="Language folder for generated translation files.",
    )
    migration_timestamp: Optional[datetime] = Field(
        default=None,
        description="Fixed migration timestamp; None means 'now' at scaffold time.",
    )
    cache_repositories: bool = Field(
        default=True,
        description="Wrap repository bindings in their cache decorator.",
    )

    # -- composer.json constraints -----------------------------------------
    php_version: str = Field(default=">=7.0.0")
    installers_version: str = Field(default="~1.0")
    core_module_version: str = Field(default="~2.0")
    phpunit_version: str = Field(default="~6.0")
    testbench_version: str = Field(default="3.5.*")

    @field_validator("language")
    @classmethod
    def _lowercase_language(cls, v: str) -> str:
        return v.strip().lower()


def load_config_file(path: Path) -> ScaffoldConfig:
    """
    Load a ``ScaffoldConfig`` from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed or validated.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text: str = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data: Any = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Invalid config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a mapping at top level of {path}, got {type(data).__name__}."
        )

    try:
        return ScaffoldConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Config validation failed for {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------


class Artifact(BaseModel):
    """A single generated file: relative path plus rendered content."""

    model_config = _FROZEN_CONFIG

    path: str = Field(..., min_length=1, description="POSIX path relative to the module root.")
    content: str = Field(..., description="Full file content.")

    @field_validator("path")
    @classmethod
    def _relative_path(cls, v: str) -> str:
        if v.startswith("/") or ".." in v.split("/"):
            raise ValueError(f"artifact path must stay inside the module: {v!r}")
        return v

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        if not self.content:
            return 0
        return self.content.count("\n") + (0 if self.content.endswith("\n") else 1)

    @computed_field  # type: ignore[misc]
    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))


class ArtifactPlan(BaseModel):
    """
    Ordered mapping of relative path → rendered content.

    Insertion order is generation order, so the same descriptor always
    produces the same sequence.  Paths are unique.
    """

    model_config = _SHARED_CONFIG

    module_name: str = Field(..., min_length=1)
    artifacts: List[Artifact] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_paths(self) -> "ArtifactPlan":
        seen: Set[str] = set()
        for artifact in self.artifacts:
            if artifact.path in seen:
                raise ValueError(f"Duplicate artifact path: {artifact.path}")
            seen.add(artifact.path)
        return self

    # -- Mutation -----------------------------------------------------------

    def add(self, path: str, content: str) -> Artifact:
        """Append an artifact; a path may only be planned once."""
        if self.get(path) is not None:
            raise ValueError(f"Artifact already planned: {path}")
        artifact: Artifact = Artifact(path=path, content=content)
        self.artifacts.append(artifact)
        return artifact

    # -- Query --------------------------------------------------------------

    def get(self, path: str) -> Optional[Artifact]:
        for artifact in self.artifacts:
            if artifact.path == path:
                return artifact
        return None

    def paths(self) -> List[str]:
        return [a.path for a in self.artifacts]

    def under(self, prefix: str) -> List[Artifact]:
        """Artifacts whose path lies below directory *prefix*."""
        base: str = prefix.rstrip("/") + "/"
        return [a for a in self.artifacts if a.path.startswith(base)]

    def as_dict(self) -> Dict[str, str]:
        return {a.path: a.content for a in self.artifacts}

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    @computed_field  # type: ignore[misc]
    @property
    def total_files(self) -> int:
        return len(self.artifacts)

    @computed_field  # type: ignore[misc]
    @property
    def total_lines(self) -> int:
        return sum(a.line_count for a in self.artifacts)

    @computed_field  # type: ignore[misc]
    @property
    def total_bytes(self) -> int:
        return sum(a.size_bytes for a in self.artifacts)

    def __repr__(self) -> str:
        return (
            f"<ArtifactPlan {self.module_name}: {self.total_files} files, "
            f"{self.total_lines} lines>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "PersistenceStrategy",
    "ModuleDescriptor",
    "ScaffoldConfig",
    "load_config_file",
    "Artifact",
    "ArtifactPlan",
]

logger.debug("workshop.models loaded, %d public symbols.", len(__all__))
