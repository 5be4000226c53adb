# File: workshop/scaffold.py
"""
Workshop - Module Scaffold (Orchestrator)
==========================================

Connects every phase together:

    Descriptor → Validation → Existence check → Planning → Export

``ModuleScaffold`` is a fluent, immutable builder: every setter returns a
new instance, and nothing touches the file system until ``scaffold()``.

Workflow::

    1. Build a ``ModuleDescriptor`` from the configured fields.
    2. Validate it (validators.py); warnings are logged, errors raise.
    3. Resolve ``<modules_root>/<name>`` and refuse an existing directory.
    4. Plan every artifact (planner.py); no I/O.
    5. Hand the plan to ``ModuleExporter`` (exporters.py).
    6. Return a ``ScaffoldReport`` with timings and file records.

Error handling strategy:
    - Every failure raises a ``ScaffoldError`` subclass; nothing is
      collected and returned as data.
    - ``ModuleExistsError`` is raised before the first write.
    - A write failure after that point leaves earlier files in place.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from workshop.exceptions import InvalidDescriptorError, ModuleExistsError
from workshop.exporters import ExportResult, FileRecord, ModuleExporter
from workshop.models import ArtifactPlan, ModuleDescriptor, PersistenceStrategy, ScaffoldConfig
from workshop.naming import package_name
from workshop.planner import ArtifactPlanner
from workshop.utils import Timer
from workshop.validators import ValidationResult, validate_descriptor

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("workshop.scaffold")


# ---------------------------------------------------------------------------
# Scaffold report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class ScaffoldStepMetric:
    """Timing for a single pipeline step."""

    step_name: str = ""
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class ScaffoldReport:
    """Produced by ``ModuleScaffold.scaffold()`` once the module is on disk."""

    module_name: str = ""
    module_path: str = ""
    package_name: str = ""
    strategy: str = ""
    entity_count: int = 0
    value_object_count: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[ScaffoldStepMetric] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
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

    def step(self, name: str) -> Optional[ScaffoldStepMetric]:
        for metric in self.step_metrics:
            if metric.step_name == name:
                return metric
        return None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        lines.append(f"{'='*60}")
        lines.append(f"  Module Scaffold Report: {self.module_name}")
        lines.append(f"{'='*60}")
        lines.append(f"  Package:        {self.package_name}")
        lines.append(f"  Path:           {self.module_path}")
        lines.append(f"  Strategy:       {self.strategy}")
        lines.append(f"  Entities:       {self.entity_count}")
        lines.append(f"  Value objects:  {self.value_object_count}")
        lines.append(f"  Files written:  {self.total_files}")
        lines.append(f"  Total lines:    {self.total_lines:,}")
        lines.append(f"  Total bytes:    {self.total_bytes:,}")
        lines.append(f"  Total time:     {self.total_elapsed_seconds:.3f}s")

        if self.step_metrics:
            lines.append(f"{'-'*60}")
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                lines.append(
                    f"    {step.step_name:<12s} {step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        if self.validation_warnings:
            lines.append(f"{'-'*60}")
            lines.append(f"  Warnings ({len(self.validation_warnings)}):")
            for warn in self.validation_warnings:
                lines.append(f"    ! {warn}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Descriptor file loading
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_descriptor_file(path: Path) -> Dict[str, Any]:
    """
    Load a module descriptor file (JSON or YAML).

    Dispatches based on file extension; unknown extensions try JSON first,
    then YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed or isn't a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Descriptor file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Descriptor path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s', trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


# ---------------------------------------------------------------------------
# ModuleScaffold: fluent builder + orchestrator
# ---------------------------------------------------------------------------

_REQUIRED_FIELDS: Tuple[str, ...] = ("vendor", "name", "entity_type")

# Accepted spellings in descriptor mappings
_MAPPING_KEYS: Dict[str, str] = {
    "vendor": "vendor",
    "name": "name",
    "entity_type": "entity_type",
    "entityType": "entity_type",
    "entities": "entities",
    "value_objects": "value_objects",
    "valueObjects": "value_objects",
}


class ModuleScaffold:
    """
    Fluent module builder.

    Usage::

        report = (
            ModuleScaffold(config)
            .vendor("asgardcms")
            .name("Blog")
            .set_entity_type("Eloquent")
            .with_entities(["Post", "Category"])
            .with_value_objects(["Slug"])
            .scaffold()
        )
        print(report.summary())
    """

    def __init__(
        self,
        config: Optional[ScaffoldConfig] = None,
        *,
        fail_on_warnings: bool = False,
        planner: Optional[ArtifactPlanner] = None,
        fields: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._config: ScaffoldConfig = config or ScaffoldConfig()
        self._fail_on_warnings: bool = fail_on_warnings
        self._planner: ArtifactPlanner = planner or ArtifactPlanner(self._config)
        self._fields: Dict[str, Any] = dict(fields or {})

    # -----------------------------------------------------------------
    # Alternate constructors
    # -----------------------------------------------------------------

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any],
        config: Optional[ScaffoldConfig] = None,
        **kwargs: Any,
    ) -> "ModuleScaffold":
        """
        Build from a plain mapping such as a parsed descriptor file.

        Raises:
            InvalidDescriptorError: On keys that are not descriptor fields.
        """
        unknown: List[str] = sorted(str(k) for k in raw if k not in _MAPPING_KEYS)
        if unknown:
            raise InvalidDescriptorError(
                [f"unknown descriptor key '{key}'" for key in unknown]
            )
        fields: Dict[str, Any] = {_MAPPING_KEYS[k]: v for k, v in raw.items()}
        return cls(config, fields=fields, **kwargs)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        config: Optional[ScaffoldConfig] = None,
        **kwargs: Any,
    ) -> "ModuleScaffold":
        return cls.from_mapping(load_descriptor_file(Path(path)), config, **kwargs)

    # -----------------------------------------------------------------
    # Fluent setters
    # -----------------------------------------------------------------

    def _with(self, **changes: Any) -> "ModuleScaffold":
        fields: Dict[str, Any] = dict(self._fields)
        fields.update(changes)
        return ModuleScaffold(
            self._config,
            fail_on_warnings=self._fail_on_warnings,
            planner=self._planner,
            fields=fields,
        )

    def vendor(self, vendor: str) -> "ModuleScaffold":
        return self._with(vendor=vendor)

    def name(self, name: str) -> "ModuleScaffold":
        return self._with(name=name)

    def set_entity_type(
        self, entity_type: Union[str, PersistenceStrategy]
    ) -> "ModuleScaffold":
        return self._with(entity_type=entity_type)

    def with_entities(self, entities: Iterable[str]) -> "ModuleScaffold":
        return self._with(entities=self._as_list(entities))

    def with_value_objects(self, value_objects: Iterable[str]) -> "ModuleScaffold":
        return self._with(value_objects=self._as_list(value_objects))

    @staticmethod
    def _as_list(names: Iterable[str]) -> Any:
        # A bare string is passed through so the descriptor rejects it
        return names if isinstance(names, str) else list(names)

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    @property
    def config(self) -> ScaffoldConfig:
        return self._config

    def module_path(self, name: Optional[str] = None) -> Path:
        """``<modules_root>/<name>``; the vendor never appears in the path."""
        module_name: str = (name or self._fields.get("name") or "").strip()
        if not module_name:
            raise InvalidDescriptorError(["name is required"])
        return Path(self._config.modules_root) / module_name

    def build_descriptor(self) -> ModuleDescriptor:
        """
        Turn the configured fields into a validated ``ModuleDescriptor``.

        Raises:
            InvalidDescriptorError: On missing required fields or values
                pydantic rejects (blank names, unknown entity type, ...).
        """
        missing: List[str] = [
            f"{key} is required"
            for key in _REQUIRED_FIELDS
            if self._fields.get(key) is None
        ]
        if missing:
            logger.error("Descriptor incomplete: %s", ", ".join(missing))
            raise InvalidDescriptorError(missing)

        try:
            return ModuleDescriptor.model_validate(self._fields)
        except ValidationError as exc:
            messages: List[str] = [
                f"{'.'.join(str(p) for p in err['loc']) or 'descriptor'}: {err['msg']}"
                for err in exc.errors()
            ]
            logger.error("Descriptor rejected: %s", "; ".join(messages))
            raise InvalidDescriptorError(messages) from exc

    def plan(self, timestamp: Optional[datetime] = None) -> ArtifactPlan:
        """Validate and plan without writing anything."""
        descriptor: ModuleDescriptor = self.build_descriptor()
        self._check(validate_descriptor(descriptor))
        return self._planner.plan(descriptor, timestamp or self._timestamp())

    # -----------------------------------------------------------------
    # Terminal operation
    # -----------------------------------------------------------------

    def scaffold(self) -> ScaffoldReport:
        """
        Generate the module on disk.

        Raises:
            InvalidDescriptorError: Descriptor incomplete or inconsistent.
            InvalidNameError: A name cannot be derived.
            ModuleExistsError: ``<modules_root>/<name>`` already exists.
            ArtifactWriteError: A directory or file could not be written.
        """
        with Timer("scaffold") as total:
            descriptor: ModuleDescriptor = self.build_descriptor()
            report: ScaffoldReport = ScaffoldReport(
                module_name=descriptor.name,
                package_name=package_name(descriptor.vendor, descriptor.name),
                strategy=descriptor.strategy.value,
                entity_count=len(descriptor.entities),
                value_object_count=len(descriptor.value_objects),
            )

            self._step_validate(descriptor, report)

            module_root: Path = self.module_path(descriptor.name)
            report.module_path = str(module_root)
            if module_root.exists():
                logger.error("Module %s already exists at %s.", descriptor.name, module_root)
                raise ModuleExistsError(descriptor.name, module_root)

            plan: ArtifactPlan = self._step_plan(descriptor, report)
            export: ExportResult = self._step_export(plan, module_root, report)
            report.files = list(export.manifest.files)

        report.total_elapsed_seconds = total.elapsed
        logger.info(
            "Module %s scaffolded: %d files in %.3fs.",
            descriptor.name,
            report.total_files,
            total.elapsed,
        )
        return report

    # -----------------------------------------------------------------
    # Pipeline steps
    # -----------------------------------------------------------------

    def _step_validate(self, descriptor: ModuleDescriptor, report: ScaffoldReport) -> None:
        with Timer("validate") as t:
            result: ValidationResult = validate_descriptor(descriptor)
        report.validation_warnings.extend(w.message for w in result.warnings)
        report.step_metrics.append(ScaffoldStepMetric(
            step_name="validate",
            elapsed_seconds=t.elapsed,
            detail=result.summary(),
        ))
        self._check(result)

    def _step_plan(self, descriptor: ModuleDescriptor, report: ScaffoldReport) -> ArtifactPlan:
        with Timer("plan") as t:
            plan: ArtifactPlan = self._planner.plan(descriptor, self._timestamp())
        report.step_metrics.append(ScaffoldStepMetric(
            step_name="plan",
            elapsed_seconds=t.elapsed,
            detail=f"{plan.total_files} artifacts",
        ))
        return plan

    def _step_export(
        self, plan: ArtifactPlan, module_root: Path, report: ScaffoldReport
    ) -> ExportResult:
        exporter: ModuleExporter = ModuleExporter(
            module_root, atomic_writes=self._config.atomic_writes
        )
        result: ExportResult = exporter.export(plan)
        report.step_metrics.append(ScaffoldStepMetric(
            step_name="export",
            elapsed_seconds=result.elapsed_seconds,
            detail=f"{result.manifest.total_bytes:,} bytes",
        ))
        return result

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _check(self, result: ValidationResult) -> None:
        for warn in result.warnings:
            logger.warning("%s", warn)
        if result.has_errors:
            raise InvalidDescriptorError([e.message for e in result.errors])
        if self._fail_on_warnings and result.has_warnings:
            raise InvalidDescriptorError([w.message for w in result.warnings])

    def _timestamp(self) -> datetime:
        return self._config.migration_timestamp or datetime.now()

    def __repr__(self) -> str:
        return f"<ModuleScaffold {self._fields!r}>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModuleScaffold",
    "ScaffoldReport",
    "ScaffoldStepMetric",
    "load_descriptor_file",
]

logger.debug("workshop.scaffold loaded.")
