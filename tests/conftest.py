"""
tests/conftest.py
Shared fixtures for the workshop test suite.

No external mocking libraries are used; modules are scaffolded for real
inside temporary directories managed by pytest's tmp_path fixture.
"""

from __future__ import annotations

import pathlib
from datetime import datetime
from typing import Any, Dict

import pytest
import yaml

from workshop.models import ModuleDescriptor, ScaffoldConfig
from workshop.planner import ArtifactPlanner
from workshop.scaffold import ModuleScaffold
from workshop.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FIXED_TIMESTAMP: datetime = datetime(2017, 3, 14, 9, 26, 53)
MODULE_NAME: str = "TestingTestModule"
VENDOR: str = "asgardcms"


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def modules_root(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "Modules"


@pytest.fixture()
def config(modules_root: pathlib.Path) -> ScaffoldConfig:
    """Config writing below tmp_path with a reproducible migration timestamp."""
    return ScaffoldConfig(modules_root=modules_root, migration_timestamp=FIXED_TIMESTAMP)


@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture()
def planner(config: ScaffoldConfig, renderer: TemplateRenderer) -> ArtifactPlanner:
    return ArtifactPlanner(config, renderer)


# ---------------------------------------------------------------------------
# Descriptor fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def descriptor_dict() -> Dict[str, Any]:
    return {
        "vendor": VENDOR,
        "name": MODULE_NAME,
        "entity_type": "Eloquent",
        "entities": ["Post", "Category"],
        "value_objects": [],
    }


@pytest.fixture()
def eloquent_descriptor(descriptor_dict: Dict[str, Any]) -> ModuleDescriptor:
    return ModuleDescriptor.model_validate(descriptor_dict)


@pytest.fixture()
def doctrine_descriptor(descriptor_dict: Dict[str, Any]) -> ModuleDescriptor:
    return ModuleDescriptor.model_validate(dict(descriptor_dict, entity_type="Doctrine"))


@pytest.fixture()
def descriptor_yaml_path(descriptor_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the descriptor dict to a temporary YAML file and return its path."""
    path = tmp_path / "module.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(descriptor_dict, fh, default_flow_style=False)
    return path


# ---------------------------------------------------------------------------
# Builder fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def scaffold(config: ScaffoldConfig) -> ModuleScaffold:
    """Builder with vendor, name and Eloquent strategy set; no entities yet."""
    return (
        ModuleScaffold(config)
        .vendor(VENDOR)
        .name(MODULE_NAME)
        .set_entity_type("Eloquent")
    )


@pytest.fixture()
def module_path(modules_root: pathlib.Path) -> pathlib.Path:
    return modules_root / MODULE_NAME
