# File: workshop/planner.py
"""
Workshop - Artifact Planner
============================
Expands a ``ModuleDescriptor`` into the complete ``ArtifactPlan`` for one
module: every relative path and its rendered content.  Nothing is written
here; the same ``(descriptor, timestamp)`` always yields the same plan.

Generation order::

    1. Module-level names derived once, persistence variant selected once.
    2. Per entity (input order):
         Entities/<E>.php, Entities/<E>Translation.php
         Repositories/<E>Repository.php
         Repositories/<Variant>/<Variant><E>Repository.php
         Repositories/Cache/Cache<E>Decorator.php
         Http/Controllers/Admin/<E>Controller.php
         Resources/views/admin/<es>/{index,create,edit}.blade.php
         Resources/views/admin/<es>/partials/{create,edit}-fields.blade.php
         Resources/lang/<lang>/<es>.php
         Database/Migrations/<two files, variant specific>
       then Repositories/<Variant>/bindings.php when there are entities.
    3. Per value object: ValueObjects/<V>.php
    4. Module singletons (manifests, providers, routes, sidebar, config).

Persistence strategies are a closed set of ``PersistenceVariant`` classes;
each owns the repository, migration and container-binding output that
differs between strategies.  Everything else is strategy-invariant.
"""

from __future__ import annotations

import abc
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from workshop.models import (
    ArtifactPlan,
    ModuleDescriptor,
    PersistenceStrategy,
    ScaffoldConfig,
)
from workshop.naming import DerivedNameSet, derive, package_name, to_studly_case
from workshop.templates import ConditionalTemplate, TemplateRenderer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("workshop.planner")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ENTITY_VIEWS: Tuple[str, ...] = ("index", "create", "edit")
ENTITY_PARTIALS: Tuple[str, ...] = ("create-fields", "edit-fields")

SIDEBAR_TEMPLATE: ConditionalTemplate = ConditionalTemplate(
    collection="entities",
    populated="sidebar/sidebar-extender.php.j2",
    empty="sidebar/sidebar-extender-empty.php.j2",
)

_JSON_INDENT: int = 4


# ---------------------------------------------------------------------------
# Persistence variants
# ---------------------------------------------------------------------------


class PersistenceVariant(abc.ABC):
    """Strategy-specific part of entity generation."""

    strategy: PersistenceStrategy

    @property
    def directory(self) -> str:
        """``Eloquent`` or ``Doctrine``: sub-folder and class-name prefix."""
        return self.strategy.value

    def repository_path(self, entity: DerivedNameSet) -> str:
        return (
            f"Repositories/{self.directory}/"
            f"{self.directory}{entity.studly_singular}Repository.php"
        )

    def repository(
        self, renderer: TemplateRenderer, context: Dict[str, Any]
    ) -> Tuple[str, str]:
        """Concrete repository for the entity in *context*."""
        entity: DerivedNameSet = context["entity"]
        return (
            self.repository_path(entity),
            renderer.render(self.repository_template, context),
        )

    @property
    def bindings_path(self) -> str:
        return f"Repositories/{self.directory}/bindings.php"

    def binding(self, renderer: TemplateRenderer, context: Dict[str, Any]) -> str:
        """Factory entry binding the repository interface of one entity."""
        return renderer.render(self.binding_template, context)

    def bindings(
        self, renderer: TemplateRenderer, context: Dict[str, Any], entries: List[str]
    ) -> Tuple[str, str]:
        """
        Container bindings file for this variant.

        The module service provider requires every
        ``Repositories/*/bindings.php`` it finds, so the provider itself
        never names a variant.
        """
        return (
            self.bindings_path,
            renderer.render(
                "repositories/bindings.php.j2",
                dict(context, variant=self.directory, bindings=entries),
            ),
        )

    @property
    @abc.abstractmethod
    def repository_template(self) -> str:
        ...

    @property
    @abc.abstractmethod
    def binding_template(self) -> str:
        ...

    @abc.abstractmethod
    def migrations(
        self,
        renderer: TemplateRenderer,
        context: Dict[str, Any],
        moment: datetime,
    ) -> List[Tuple[str, str]]:
        """Base-table and translation-table migrations, in run order."""


class EloquentVariant(PersistenceVariant):
    """Laravel Eloquent repositories and schema-builder migrations."""

    strategy = PersistenceStrategy.ELOQUENT
    repository_template = "repositories/eloquent-repository.php.j2"
    binding_template = "repositories/binding-eloquent.php.j2"

    def migrations(
        self,
        renderer: TemplateRenderer,
        context: Dict[str, Any],
        moment: datetime,
    ) -> List[Tuple[str, str]]:
        result: List[Tuple[str, str]] = []
        pairs: Tuple[Tuple[str, str], ...] = (
            (context["table"], "migrations/eloquent-create-table.php.j2"),
            (context["translation_table"], "migrations/eloquent-create-translation-table.php.j2"),
        )
        for offset, (table, template) in enumerate(pairs):
            stamp: datetime = moment + timedelta(seconds=offset)
            # Laravel resolves the class from the file name, minus the date prefix
            basename: str = f"create_{table.replace('__', '_')}_table"
            path: str = f"Database/Migrations/{stamp:%Y_%m_%d_%H%M%S}_{basename}.php"
            migration_context: Dict[str, Any] = dict(
                context, class_name=to_studly_case(basename)
            )
            result.append((path, renderer.render(template, migration_context)))
        return result


class DoctrineVariant(PersistenceVariant):
    """Doctrine ORM repositories and doctrine/migrations version classes."""

    strategy = PersistenceStrategy.DOCTRINE
    repository_template = "repositories/doctrine-repository.php.j2"
    binding_template = "repositories/binding-doctrine.php.j2"

    def migrations(
        self,
        renderer: TemplateRenderer,
        context: Dict[str, Any],
        moment: datetime,
    ) -> List[Tuple[str, str]]:
        result: List[Tuple[str, str]] = []
        templates: Tuple[str, ...] = (
            "migrations/doctrine-create-table.php.j2",
            "migrations/doctrine-create-translation-table.php.j2",
        )
        for offset, template in enumerate(templates):
            stamp: datetime = moment + timedelta(seconds=offset)
            class_name: str = f"Version{stamp:%Y%m%d%H%M%S}"
            path: str = f"Database/Migrations/{class_name}.php"
            migration_context: Dict[str, Any] = dict(context, class_name=class_name)
            result.append((path, renderer.render(template, migration_context)))
        return result


_VARIANTS: Dict[PersistenceStrategy, PersistenceVariant] = {
    PersistenceStrategy.ELOQUENT: EloquentVariant(),
    PersistenceStrategy.DOCTRINE: DoctrineVariant(),
}


def variant_for(strategy: PersistenceStrategy) -> PersistenceVariant:
    """Return the generation variant for *strategy*."""
    return _VARIANTS[PersistenceStrategy.from_label(strategy)]


# ---------------------------------------------------------------------------
# ArtifactPlanner
# ---------------------------------------------------------------------------


class ArtifactPlanner:
    """
    Turns a descriptor into an ``ArtifactPlan``.

    Stateless between calls; one planner can serve many descriptors.
    """

    def __init__(
        self,
        config: Optional[ScaffoldConfig] = None,
        renderer: Optional[TemplateRenderer] = None,
    ) -> None:
        self._config: ScaffoldConfig = config or ScaffoldConfig()
        self._renderer: TemplateRenderer = renderer or TemplateRenderer(
            self._config.stubs_dir
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def plan(self, descriptor: ModuleDescriptor, timestamp: datetime) -> ArtifactPlan:
        """
        Compute every artifact for *descriptor*.

        Args:
            descriptor: The module to scaffold.
            timestamp: Base timestamp for migration names; entity *i* uses
                ``timestamp + 2i`` and ``timestamp + 2i + 1`` seconds.

        Raises:
            InvalidNameError: If any module, entity or value-object name
                cannot be derived.
        """
        variant: PersistenceVariant = variant_for(descriptor.entity_type)
        base: Dict[str, Any] = self._base_context(descriptor, variant)
        plan: ArtifactPlan = ArtifactPlan(module_name=descriptor.name)

        bindings: List[str] = []
        for index, entity in enumerate(base["entities"]):
            context: Dict[str, Any] = self._entity_context(base, entity)
            self._plan_entity(plan, context, variant)
            self._plan_migrations(
                plan, context, variant, timestamp + timedelta(seconds=2 * index)
            )
            bindings.append(variant.binding(self._renderer, context).rstrip("\n"))

        if bindings:
            plan.add(*variant.bindings(self._renderer, base, bindings))

        for value_object in base["value_objects"]:
            context = dict(base, value_object=value_object)
            plan.add(
                f"ValueObjects/{value_object.studly_singular}.php",
                self._renderer.render("value-objects/value-object.php.j2", context),
            )

        self._plan_module_files(plan, base, descriptor)

        logger.info(
            "Planned %d artifacts for module %s (%s, %d entities, %d value objects).",
            plan.total_files,
            descriptor.name,
            variant.directory,
            len(descriptor.entities),
            len(descriptor.value_objects),
        )
        return plan

    # -----------------------------------------------------------------
    # Internal: contexts
    # -----------------------------------------------------------------

    def _base_context(
        self, descriptor: ModuleDescriptor, variant: PersistenceVariant
    ) -> Dict[str, Any]:
        module: DerivedNameSet = derive(descriptor.name, descriptor.vendor)
        entities: List[DerivedNameSet] = [derive(e) for e in descriptor.entities]
        value_objects: List[DerivedNameSet] = [derive(v) for v in descriptor.value_objects]
        return {
            "module": module,
            "module_name": descriptor.name,
            "vendor": descriptor.vendor.lower(),
            "package_name": package_name(descriptor.vendor, descriptor.name),
            "entities": entities,
            "value_objects": value_objects,
            "language": self._config.language,
            "cache_repositories": self._config.cache_repositories,
        }

    @staticmethod
    def _entity_context(base: Dict[str, Any], entity: DerivedNameSet) -> Dict[str, Any]:
        module: DerivedNameSet = base["module"]
        return dict(
            base,
            entity=entity,
            table=f"{module.lower_singular}__{entity.snake_plural}",
            translation_table=f"{module.lower_singular}__{entity.snake_singular}_translations",
            foreign_key=f"{entity.snake_singular}_id",
        )

    # -----------------------------------------------------------------
    # Internal: per-entity fan-out
    # -----------------------------------------------------------------

    def _plan_entity(
        self,
        plan: ArtifactPlan,
        context: Dict[str, Any],
        variant: PersistenceVariant,
    ) -> None:
        entity: DerivedNameSet = context["entity"]
        name: str = entity.studly_singular
        render = self._renderer.render

        plan.add(f"Entities/{name}.php", render("entities/entity.php.j2", context))
        plan.add(
            f"Entities/{entity.translation_entity}.php",
            render("entities/translation-entity.php.j2", context),
        )
        plan.add(
            f"Repositories/{name}Repository.php",
            render("repositories/repository-interface.php.j2", context),
        )
        plan.add(*variant.repository(self._renderer, context))
        plan.add(
            f"Repositories/Cache/Cache{name}Decorator.php",
            render("repositories/cache-decorator.php.j2", context),
        )
        plan.add(
            f"Http/Controllers/Admin/{name}Controller.php",
            render("controllers/admin-controller.php.j2", context),
        )

        views_dir: str = f"Resources/views/admin/{entity.lower_plural}"
        for view in ENTITY_VIEWS:
            plan.add(
                f"{views_dir}/{view}.blade.php",
                render(f"views/{view}.blade.php.j2", context),
            )
        for partial in ENTITY_PARTIALS:
            plan.add(
                f"{views_dir}/partials/{partial}.blade.php",
                render(f"views/partials/{partial}.blade.php.j2", context),
            )

        plan.add(
            f"Resources/lang/{context['language']}/{entity.lower_plural}.php",
            render("lang/entity.php.j2", context),
        )
        logger.debug("Planned entity %s.", name)

    def _plan_migrations(
        self,
        plan: ArtifactPlan,
        context: Dict[str, Any],
        variant: PersistenceVariant,
        moment: datetime,
    ) -> None:
        for path, content in variant.migrations(self._renderer, context, moment):
            plan.add(path, content)

    # -----------------------------------------------------------------
    # Internal: module singletons
    # -----------------------------------------------------------------

    def _plan_module_files(
        self,
        plan: ArtifactPlan,
        context: Dict[str, Any],
        descriptor: ModuleDescriptor,
    ) -> None:
        render = self._renderer.render
        name: str = descriptor.name

        plan.add("Http/backendRoutes.php", render("http/backend-routes.php.j2", context))
        plan.add(
            f"Providers/{name}ServiceProvider.php",
            render("providers/module-service-provider.php.j2", context),
        )
        plan.add(
            "Providers/RouteServiceProvider.php",
            render("providers/route-service-provider.php.j2", context),
        )
        plan.add("Sidebar/SidebarExtender.php", render(SIDEBAR_TEMPLATE, context))
        plan.add("Config/permissions.php", render("config/permissions.php.j2", context))
        plan.add("Config/config.php", render("config/config.php.j2", context))
        plan.add(
            f"Database/Seeders/{name}DatabaseSeeder.php",
            render("seeders/database-seeder.php.j2", context),
        )
        plan.add("start.php", render("start.php.j2", context))
        plan.add("composer.json", self._composer_json(descriptor))
        plan.add("module.json", self._module_json(descriptor))

    def _composer_json(self, descriptor: ModuleDescriptor) -> str:
        cfg: ScaffoldConfig = self._config
        namespace: str = f"Modules\\{descriptor.name}\\"
        manifest: Dict[str, Any] = {
            "name": package_name(descriptor.vendor, descriptor.name),
            "type": "asgard-module",
            "description": "",
            "keywords": [],
            "license": "MIT",
            "require": {
                "php": cfg.php_version,
                "composer/installers": cfg.installers_version,
                "asgardcms/core-module": cfg.core_module_version,
            },
            "require-dev": {
                "phpunit/phpunit": cfg.phpunit_version,
                "orchestra/testbench": cfg.testbench_version,
            },
            "autoload-dev": {
                "psr-4": {
                    namespace: "",
                    f"{namespace}Tests\\": "Tests/",
                },
            },
            "minimum-stability": "stable",
            "prefer-stable": True,
        }
        return json.dumps(manifest, indent=_JSON_INDENT) + "\n"

    @staticmethod
    def _module_json(descriptor: ModuleDescriptor) -> str:
        name: str = descriptor.name
        providers_ns: str = f"Modules\\{name}\\Providers\\"
        metadata: Dict[str, Any] = {
            "name": name,
            "alias": derive(name).lower_singular,
            "description": "",
            "keywords": [],
            "active": 1,
            "order": 1,
            "providers": [
                f"{providers_ns}{name}ServiceProvider",
                f"{providers_ns}RouteServiceProvider",
            ],
            "aliases": {},
            "files": ["start.php"],
        }
        return json.dumps(metadata, indent=_JSON_INDENT) + "\n"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ArtifactPlanner",
    "PersistenceVariant",
    "EloquentVariant",
    "DoctrineVariant",
    "variant_for",
    "SIDEBAR_TEMPLATE",
    "ENTITY_VIEWS",
    "ENTITY_PARTIALS",
]

logger.debug("workshop.planner loaded.")
