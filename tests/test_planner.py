"""
tests/test_planner.py
Unit tests for workshop.planner (ArtifactPlanner and persistence variants).

Tests cover:
- Per-entity fan-out counts for both strategies
- Migration naming and timestamps
- Value objects produce a single file each
- Module singletons planned exactly once
- Strategy switch only touches repository implementations and migrations
- Service provider loads the variant's bindings file
- Determinism (same descriptor + timestamp -> same plan)
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Dict, List, Set

import pytest

from workshop.exceptions import InvalidNameError
from workshop.models import ArtifactPlan, ModuleDescriptor, PersistenceStrategy
from workshop.naming import derive
from workshop.planner import (
    ArtifactPlanner,
    DoctrineVariant,
    EloquentVariant,
    variant_for,
)


FIXED_TIMESTAMP: datetime = datetime(2017, 3, 14, 9, 26, 53)

SINGLETONS: List[str] = [
    "Http/backendRoutes.php",
    "Providers/TestingTestModuleServiceProvider.php",
    "Providers/RouteServiceProvider.php",
    "Sidebar/SidebarExtender.php",
    "Config/permissions.php",
    "Config/config.php",
    "Database/Seeders/TestingTestModuleDatabaseSeeder.php",
    "start.php",
    "composer.json",
    "module.json",
]


def _descriptor(entity_type: str = "Eloquent", entities=("Post",), value_objects=()) -> ModuleDescriptor:
    return ModuleDescriptor(
        vendor="asgardcms",
        name="TestingTestModule",
        entity_type=entity_type,
        entities=list(entities),
        value_objects=list(value_objects),
    )


# ===========================================================================
# Variants
# ===========================================================================


class TestVariantFor:

    def test_selects_by_enum(self) -> None:
        assert isinstance(variant_for(PersistenceStrategy.ELOQUENT), EloquentVariant)
        assert isinstance(variant_for(PersistenceStrategy.DOCTRINE), DoctrineVariant)

    def test_selects_by_label(self) -> None:
        assert isinstance(variant_for("doctrine"), DoctrineVariant)

    def test_unknown_label(self) -> None:
        with pytest.raises(ValueError):
            variant_for("Propel")

    def test_repository_path(self) -> None:
        post = derive("Post")
        assert EloquentVariant().repository_path(post) == "Repositories/Eloquent/EloquentPostRepository.php"
        assert DoctrineVariant().repository_path(post) == "Repositories/Doctrine/DoctrinePostRepository.php"


# ===========================================================================
# Fan-out
# ===========================================================================


class TestFanOut:

    @pytest.mark.parametrize("entity_type", ["Eloquent", "Doctrine"])
    @pytest.mark.parametrize("count", [0, 1, 3])
    def test_entities_and_migrations_double(
        self, planner: ArtifactPlanner, entity_type: str, count: int
    ) -> None:
        names = ["Post", "Category", "Tag"][:count]
        plan = planner.plan(_descriptor(entity_type, names), FIXED_TIMESTAMP)
        assert len(plan.under("Entities")) == 2 * count
        assert len(plan.under("Database/Migrations")) == 2 * count

    def test_per_entity_paths(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(), FIXED_TIMESTAMP)
        expected = [
            "Entities/Post.php",
            "Entities/PostTranslation.php",
            "Repositories/PostRepository.php",
            "Repositories/Eloquent/EloquentPostRepository.php",
            "Repositories/Cache/CachePostDecorator.php",
            "Http/Controllers/Admin/PostController.php",
            "Resources/views/admin/posts/index.blade.php",
            "Resources/views/admin/posts/create.blade.php",
            "Resources/views/admin/posts/edit.blade.php",
            "Resources/views/admin/posts/partials/create-fields.blade.php",
            "Resources/views/admin/posts/partials/edit-fields.blade.php",
            "Resources/lang/en/posts.php",
        ]
        for path in expected:
            assert path in plan, path

    def test_singletons_once(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(entities=["Post", "Category", "Tag"]), FIXED_TIMESTAMP)
        paths = plan.paths()
        for path in SINGLETONS:
            assert paths.count(path) == 1, path

    def test_no_entities_still_well_formed(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(entities=[]), FIXED_TIMESTAMP)
        assert plan.paths() == SINGLETONS

    def test_value_objects_only_add_one_file_each(self, planner: ArtifactPlanner) -> None:
        without = planner.plan(_descriptor(), FIXED_TIMESTAMP)
        with_vo = planner.plan(_descriptor(value_objects=["TimeRange", "Money"]), FIXED_TIMESTAMP)
        added: Set[str] = set(with_vo.paths()) - set(without.paths())
        assert added == {"ValueObjects/TimeRange.php", "ValueObjects/Money.php"}
        vo = with_vo.get("ValueObjects/TimeRange.php")
        assert "namespace Modules\\TestingTestModule\\ValueObjects;" in vo.content
        assert "final class TimeRange" in vo.content

    def test_only_selected_variant_repository(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor("Doctrine"), FIXED_TIMESTAMP)
        assert "Repositories/Doctrine/DoctrinePostRepository.php" in plan
        assert plan.under("Repositories/Eloquent") == []

    def test_custom_language(self, config, renderer) -> None:
        planner = ArtifactPlanner(config.model_copy(update={"language": "fr"}), renderer)
        plan = planner.plan(_descriptor(), FIXED_TIMESTAMP)
        assert "Resources/lang/fr/posts.php" in plan
        assert plan.under("Resources/lang/en") == []

    def test_invalid_entity_name_raises(self, planner: ArtifactPlanner) -> None:
        with pytest.raises(InvalidNameError):
            planner.plan(_descriptor(entities=["123"]), FIXED_TIMESTAMP)


# ===========================================================================
# Migrations
# ===========================================================================


class TestMigrations:

    def test_eloquent_names(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(entities=["Post", "Category"]), FIXED_TIMESTAMP)
        assert [a.path for a in plan.under("Database/Migrations")] == [
            "Database/Migrations/2017_03_14_092653_create_testingtestmodule_posts_table.php",
            "Database/Migrations/2017_03_14_092654_create_testingtestmodule_post_translations_table.php",
            "Database/Migrations/2017_03_14_092655_create_testingtestmodule_categories_table.php",
            "Database/Migrations/2017_03_14_092656_create_testingtestmodule_category_translations_table.php",
        ]

    def test_eloquent_content(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(), FIXED_TIMESTAMP)
        base = plan.get("Database/Migrations/2017_03_14_092653_create_testingtestmodule_posts_table.php")
        assert "class CreateTestingtestmodulePostsTable extends Migration" in base.content
        assert "Schema::create('testingtestmodule__posts'" in base.content
        translation = plan.get(
            "Database/Migrations/2017_03_14_092654_create_testingtestmodule_post_translations_table.php"
        )
        assert "Schema::create('testingtestmodule__post_translations'" in translation.content
        assert "$table->integer('post_id')->unsigned();" in translation.content
        assert "->on('testingtestmodule__posts')" in translation.content

    def test_doctrine_names_and_classes(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor("Doctrine", ["Post", "Category"]), FIXED_TIMESTAMP)
        migrations = plan.under("Database/Migrations")
        assert [a.path for a in migrations] == [
            "Database/Migrations/Version20170314092653.php",
            "Database/Migrations/Version20170314092654.php",
            "Database/Migrations/Version20170314092655.php",
            "Database/Migrations/Version20170314092656.php",
        ]
        assert "class Version20170314092653 extends AbstractMigration" in migrations[0].content
        assert "$schema->createTable('testingtestmodule__posts')" in migrations[0].content
        assert "$schema->createTable('testingtestmodule__post_translations')" in migrations[1].content

    def test_timestamp_drives_names(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor("Doctrine"), datetime(2020, 1, 1, 0, 0, 0))
        assert "Database/Migrations/Version20200101000000.php" in plan
        assert "Database/Migrations/Version20200101000001.php" in plan


# ===========================================================================
# Strategy invariance
# ===========================================================================


class TestStrategySwitch:

    def test_only_strategy_specific_files_differ(self, planner: ArtifactPlanner) -> None:
        entities = ["Post", "Category"]
        eloquent: Dict[str, str] = planner.plan(_descriptor("Eloquent", entities), FIXED_TIMESTAMP).as_dict()
        doctrine: Dict[str, str] = planner.plan(_descriptor("Doctrine", entities), FIXED_TIMESTAMP).as_dict()

        def strategy_specific(path: str) -> bool:
            return (
                path.startswith("Repositories/Eloquent/")
                or path.startswith("Repositories/Doctrine/")
                or path.startswith("Database/Migrations/")
            )

        shared = {p for p in eloquent if not strategy_specific(p)}
        assert shared == {p for p in doctrine if not strategy_specific(p)}
        for path in shared:
            assert eloquent[path] == doctrine[path], path

        provider = "Providers/TestingTestModuleServiceProvider.php"
        assert eloquent[provider] == doctrine[provider]
        assert "EloquentPostRepository" in eloquent["Repositories/Eloquent/bindings.php"]
        assert "DoctrinePostRepository" in doctrine["Repositories/Doctrine/bindings.php"]
        assert "$app['em']" in doctrine["Repositories/Doctrine/bindings.php"]


# ===========================================================================
# Content consistency
# ===========================================================================


class TestContent:

    @pytest.fixture()
    def plan(self, planner: ArtifactPlanner) -> ArtifactPlan:
        return planner.plan(_descriptor(entities=["Post"]), FIXED_TIMESTAMP)

    def test_controller_messages(self, plan: ArtifactPlan) -> None:
        controller = plan.get("Http/Controllers/Admin/PostController.php").content
        for action in ("created", "updated", "deleted"):
            expected = (
                f"withSuccess(trans('core::core.messages.resource {action}', "
                "['name' => trans('testingtestmodule::posts.title.posts')]));"
            )
            assert controller.count(expected) == 1, action

    def test_lang_defines_controller_and_permission_keys(self, plan: ArtifactPlan) -> None:
        lang = plan.get("Resources/lang/en/posts.php").content
        assert "'title' => [" in lang
        assert "'posts' => 'Posts'" in lang
        permissions = plan.get("Config/permissions.php").content
        for action in ("list", "create", "edit", "destroy"):
            assert f"'{action} resource'" in lang
            assert f"'testingtestmodule::posts.{action} resource'" in permissions

    def test_cache_decorator_implements_interface(self, plan: ArtifactPlan) -> None:
        decorator = plan.get("Repositories/Cache/CachePostDecorator.php").content
        interface = plan.get("Repositories/PostRepository.php").content
        assert "interface PostRepository extends BaseRepository" in interface
        assert "class CachePostDecorator extends BaseCacheDecorator implements PostRepository" in decorator
        assert "$this->entityName = 'testingtestmodule.posts';" in decorator

    def test_entities(self, plan: ArtifactPlan) -> None:
        entity = plan.get("Entities/Post.php").content
        translation = plan.get("Entities/PostTranslation.php").content
        assert "class Post extends Model" in entity
        assert "protected $table = 'testingtestmodule__posts';" in entity
        assert "class PostTranslation extends Model" in translation
        assert "protected $table = 'testingtestmodule__post_translations';" in translation

    def test_routes_and_permissions_align(self, plan: ArtifactPlan) -> None:
        routes = plan.get("Http/backendRoutes.php").content
        permissions = plan.get("Config/permissions.php").content
        assert "'prefix' => '/testingtestmodule'" in routes
        for action in ("index", "create", "store", "edit", "update", "destroy"):
            assert f"'as' => 'admin.testingtestmodule.post.{action}'" in routes
        for action in ("index", "create", "edit", "destroy"):
            assert f"'middleware' => 'can:testingtestmodule.posts.{action}'" in routes
            assert f"'{action}' => 'testingtestmodule::posts." in permissions
        assert "'testingtestmodule.posts' => [" in permissions

    def test_provider_loads_variant_bindings(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(entities=["Post", "Category"]), FIXED_TIMESTAMP)
        provider = plan.get("Providers/TestingTestModuleServiceProvider.php").content
        assert "class TestingTestModuleServiceProvider extends ServiceProvider" in provider
        assert "glob(__DIR__ . '/../Repositories/*/bindings.php')" in provider
        assert "$this->app->bind($abstract, $factory);" in provider
        assert "Eloquent" not in provider

    @pytest.mark.parametrize("entity_type", ["Eloquent", "Doctrine"])
    def test_bindings_file_binds_every_repository(
        self, planner: ArtifactPlanner, entity_type: str
    ) -> None:
        plan = planner.plan(_descriptor(entity_type, ["Post", "Category"]), FIXED_TIMESTAMP)
        bindings = plan.get(f"Repositories/{entity_type}/bindings.php").content
        assert f"namespace Modules\\TestingTestModule\\Repositories\\{entity_type};" in bindings
        assert "use Modules\\TestingTestModule\\Repositories\\PostRepository;" in bindings
        assert "use Modules\\TestingTestModule\\Repositories\\CategoryRepository;" in bindings
        assert "    PostRepository::class => function (Application $app) {" in bindings
        assert "    CategoryRepository::class => function (Application $app) {" in bindings
        assert f"new {entity_type}PostRepository(" in bindings
        assert "CachePostDecorator($repository)" in bindings
        assert bindings.rstrip().endswith("];")

    def test_no_bindings_file_without_entities(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(entities=[]), FIXED_TIMESTAMP)
        assert plan.under("Repositories") == []

    def test_bindings_without_cache(self, config, renderer) -> None:
        planner = ArtifactPlanner(config.model_copy(update={"cache_repositories": False}), renderer)
        plan = planner.plan(_descriptor(), FIXED_TIMESTAMP)
        bindings = plan.get("Repositories/Eloquent/bindings.php").content
        assert "CachePostDecorator" not in bindings
        assert "return $repository;" in bindings

    def test_composer_json(self, plan: ArtifactPlan) -> None:
        composer = json.loads(plan.get("composer.json").content)
        assert composer["name"] == "asgardcms/testingtestmodule"
        assert composer["type"] == "asgard-module"
        assert composer["require"]["composer/installers"] == "~1.0"
        assert composer["minimum-stability"] == "stable"
        assert composer["prefer-stable"] is True
        assert "Modules\\TestingTestModule\\" in composer["autoload-dev"]["psr-4"]

    def test_module_json(self, plan: ArtifactPlan) -> None:
        module = json.loads(plan.get("module.json").content)
        assert module["name"] == "TestingTestModule"
        assert module["alias"] == "testingtestmodule"
        assert module["order"] == 1
        assert module["files"] == ["start.php"]
        assert module["providers"] == [
            "Modules\\TestingTestModule\\Providers\\TestingTestModuleServiceProvider",
            "Modules\\TestingTestModule\\Providers\\RouteServiceProvider",
        ]

    def test_views_reference_lang_keys(self, plan: ArtifactPlan) -> None:
        index = plan.get("Resources/views/admin/posts/index.blade.php").content
        assert "{{ trans('testingtestmodule::posts.title.posts') }}" in index
        create = plan.get("Resources/views/admin/posts/create.blade.php").content
        assert "@include('testingtestmodule::admin.posts.partials.create-fields', ['lang' => $locale])" in create

    def test_no_template_markers_leak(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(entities=["Post", "Category"], value_objects=["Slug"]), FIXED_TIMESTAMP)
        for artifact in plan.artifacts:
            assert "[[" not in artifact.content, artifact.path
            assert "[%" not in artifact.content, artifact.path


# ===========================================================================
# Determinism
# ===========================================================================


class TestDeterminism:

    def test_same_input_same_plan(self, planner: ArtifactPlanner, eloquent_descriptor: ModuleDescriptor) -> None:
        first = planner.plan(eloquent_descriptor, FIXED_TIMESTAMP)
        second = planner.plan(eloquent_descriptor, FIXED_TIMESTAMP)
        assert first.as_dict() == second.as_dict()
        assert first.paths() == second.paths()

    def test_entity_order_is_input_order(self, planner: ArtifactPlanner) -> None:
        plan = planner.plan(_descriptor(entities=["Tag", "Post"]), FIXED_TIMESTAMP)
        entities = [a.path for a in plan.under("Entities")]
        assert entities == [
            "Entities/Tag.php",
            "Entities/TagTranslation.php",
            "Entities/Post.php",
            "Entities/PostTranslation.php",
        ]
