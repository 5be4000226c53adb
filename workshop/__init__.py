# File: workshop/__init__.py
"""
Workshop - AsgardCMS Module Scaffolder
=======================================

Turns a small module descriptor (vendor, module name, persistence strategy,
entities, value objects) into a complete AsgardCMS-style PHP module:
entities and their translations, repositories, cache decorators, admin
controllers, Blade views, language files, migrations, service providers,
routes, sidebar, permissions, ``composer.json`` and ``module.json``.

Architecture overview::

    ┌────────────────┐     ┌────────────────┐     ┌──────────────────┐
    │ ModuleScaffold │────▶│ ArtifactPlanner│────▶│ TemplateRenderer │
    │  (scaffold.py) │     │  (planner.py)  │     │  (templates.py)  │
    └───────┬────────┘     └───────┬────────┘     └──────────────────┘
            │                      │
       ┌────┴──────┬───────────────┼────────────┐
       ▼           ▼               ▼            ▼
  ┌──────────┐ ┌──────────┐  ┌──────────┐ ┌───────────┐
  │validators│ │exporters │  │  naming  │ │  models   │
  └──────────┘ └──────────┘  └──────────┘ └───────────┘

Usage::

    from workshop import ModuleScaffold, ScaffoldConfig

    report = (
        ModuleScaffold(ScaffoldConfig(modules_root="Modules"))
        .vendor("asgardcms")
        .name("Blog")
        .set_entity_type("Eloquent")
        .with_entities(["Post", "Category"])
        .scaffold()
    )

Public API:
    - ModuleScaffold    fluent builder and orchestrator
    - ScaffoldConfig    environment settings (modules root, language, ...)
    - ArtifactPlanner   descriptor -> ArtifactPlan, no I/O
    - ModuleExporter    writes a plan below a fresh module directory
    - derive            name -> DerivedNameSet
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from workshop.exceptions import (
    ArtifactWriteError,
    InvalidDescriptorError,
    InvalidNameError,
    ModuleExistsError,
    ScaffoldError,
)
from workshop.models import (
    Artifact,
    ArtifactPlan,
    ModuleDescriptor,
    PersistenceStrategy,
    ScaffoldConfig,
    load_config_file,
)
from workshop.naming import DerivedNameSet, derive, package_name
from workshop.templates import ConditionalTemplate, RenderMode, TemplateRenderer
from workshop.planner import (
    ArtifactPlanner,
    DoctrineVariant,
    EloquentVariant,
    PersistenceVariant,
    variant_for,
)
from workshop.validators import ValidationResult, validate_descriptor
from workshop.exporters import ExportManifest, ExportResult, FileRecord, ModuleExporter
from workshop.scaffold import ModuleScaffold, ScaffoldReport, load_descriptor_file
from workshop.utils import configure_logging

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrator
    "ModuleScaffold",
    "ScaffoldReport",
    "load_descriptor_file",
    # Models
    "Artifact",
    "ArtifactPlan",
    "ModuleDescriptor",
    "PersistenceStrategy",
    "ScaffoldConfig",
    "load_config_file",
    # Naming
    "DerivedNameSet",
    "derive",
    "package_name",
    # Templates
    "ConditionalTemplate",
    "RenderMode",
    "TemplateRenderer",
    # Planning
    "ArtifactPlanner",
    "PersistenceVariant",
    "EloquentVariant",
    "DoctrineVariant",
    "variant_for",
    # Validation
    "ValidationResult",
    "validate_descriptor",
    # Export
    "ModuleExporter",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
    # Errors
    "ScaffoldError",
    "ModuleExistsError",
    "InvalidNameError",
    "InvalidDescriptorError",
    "ArtifactWriteError",
    # Utilities
    "configure_logging",
]
