"""Unit tests for configuration (fastify_starter.config)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from fastify_starter.config import (
    DEFAULT_REGISTRY_URL,
    DEFAULT_TEMPLATE_DIR,
    MAX_NAME_LENGTH,
    Database,
    Linter,
    Orm,
    ProjectOptions,
    Settings,
    merge_options,
    project_name_problems,
    resolve_options,
    validate_project_name,
    validate_project_options,
)
from fastify_starter.errors import ErrorCategory, ValidationError


class TestProjectOptions:
    @pytest.mark.unit
    def test_defaults(self):
        options = ProjectOptions()
        assert options.database is Database.SQLITE
        assert options.orm is Orm.PRISMA
        assert options.linter is Linter.BIOME
        assert options.install_dependencies is True
        assert options.init_git is True
        assert options.uses_orm is True

    @pytest.mark.unit
    def test_string_values_coerced(self):
        options = ProjectOptions(database="postgres", orm="none", linter="eslint")
        assert options.database is Database.POSTGRES
        assert options.uses_orm is False
        assert options.linter is Linter.ESLINT

    @pytest.mark.unit
    def test_frozen(self):
        options = ProjectOptions()
        with pytest.raises(PydanticValidationError):
            options.database = Database.MYSQL

    @pytest.mark.unit
    def test_describe(self):
        described = ProjectOptions(database="mysql", linter="eslint", init_git=False).describe()
        assert described == {
            "Database": "MYSQL",
            "ORM": "Prisma",
            "Linter": "ESLint",
            "Git": "No",
            "Install": "Yes",
        }


class TestValidateProjectOptions:
    @pytest.mark.unit
    def test_none_means_default(self):
        options = validate_project_options({"database": None, "linter": "eslint"})
        assert options.database is Database.SQLITE
        assert options.linter is Linter.ESLINT

    @pytest.mark.unit
    def test_out_of_domain_value(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_project_options({"database": "mongodb"})
        plan = exc_info.value.plan
        assert plan.category is ErrorCategory.VALIDATION
        assert plan.context is not None
        assert "database" in (plan.context.details or "")

    @pytest.mark.unit
    def test_unknown_key(self):
        with pytest.raises(ValidationError):
            validate_project_options({"framework": "express"})


class TestMergeOptions:
    @pytest.mark.unit
    def test_flags_win_over_prompt(self):
        asked: list[str] = []

        def prompt(field: str, default: Any) -> Any:
            asked.append(field)
            return default

        merged = merge_options({"database": "mysql", "init_git": False}, prompt)

        assert merged["database"] == "mysql"
        assert merged["init_git"] is False
        assert "database" not in asked
        assert "init_git" not in asked
        assert set(asked) == {"orm", "linter", "install_dependencies"}

    @pytest.mark.unit
    def test_prompt_receives_plain_defaults(self):
        received: dict[str, Any] = {}

        def prompt(field: str, default: Any) -> Any:
            received[field] = default
            return default

        merge_options({}, prompt)

        assert received["database"] == "sqlite"
        assert received["linter"] == "biome"
        assert received["install_dependencies"] is True

    @pytest.mark.unit
    def test_without_prompt_leaves_gaps(self):
        merged = merge_options({"linter": "eslint"})
        assert merged["database"] is None
        assert merged["linter"] == "eslint"

    @pytest.mark.unit
    def test_resolve_validates(self):
        options = resolve_options({"orm": "none"}, lambda field, default: default)
        assert options.uses_orm is False

        with pytest.raises(ValidationError):
            resolve_options({"orm": "drizzle"})


class TestProjectName:
    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["my-app", "app2", "demo.app", "a_b", "x"])
    def test_valid(self, name: str):
        assert validate_project_name(name) == name
        assert project_name_problems(name) == []

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name",
        ["", "   ", "MyApp", ".hidden", "_private", "node_modules", "has space", "a/b", "../escape"],
    )
    def test_invalid(self, name: str):
        with pytest.raises(ValidationError) as exc_info:
            validate_project_name(name)
        assert exc_info.value.plan.category is ErrorCategory.VALIDATION

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name", ["fastify-react-router-starter-demo", "my-fastify-react-router-starter"]
    )
    def test_embedding_template_placeholder(self, name: str):
        problems = project_name_problems(name)
        assert any("template placeholder" in problem for problem in problems)
        with pytest.raises(ValidationError):
            validate_project_name(name)

    @pytest.mark.unit
    def test_template_placeholder_itself_is_allowed(self):
        assert project_name_problems("fastify-react-router-starter") == []

    @pytest.mark.unit
    def test_length_limit(self):
        assert validate_project_name("a" * MAX_NAME_LENGTH)
        assert project_name_problems("a" * (MAX_NAME_LENGTH + 1))


class TestSettings:
    @pytest.mark.unit
    def test_defaults(self):
        settings = Settings()
        assert settings.registry_url == DEFAULT_REGISTRY_URL
        assert settings.version_timeout == 3.0
        assert settings.check_versions is True
        assert settings.package_manager == "pnpm"
        assert settings.template_dir == DEFAULT_TEMPLATE_DIR

    @pytest.mark.unit
    def test_timeout_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            Settings(version_timeout=0)

    @pytest.mark.unit
    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("FASTIFY_STARTER_REGISTRY", "https://npm.example.com")
        monkeypatch.setenv("FASTIFY_STARTER_VERSION_TIMEOUT", "1.5")
        monkeypatch.setenv("FASTIFY_STARTER_SKIP_VERSION_CHECK", "true")
        monkeypatch.setenv("FASTIFY_STARTER_PACKAGE_MANAGER", "pnpm@9")
        monkeypatch.setenv("FASTIFY_STARTER_COMMAND_TIMEOUT", "30")
        monkeypatch.setenv("FASTIFY_STARTER_TEMPLATE_DIR", str(tmp_path))

        settings = Settings.from_env()

        assert settings.registry_url == "https://npm.example.com"
        assert settings.version_timeout == 1.5
        assert settings.check_versions is False
        assert settings.package_manager == "pnpm@9"
        assert settings.command_timeout == 30
        assert settings.template_dir == tmp_path

    @pytest.mark.unit
    def test_from_env_without_variables(self, monkeypatch: pytest.MonkeyPatch):
        for name in (
            "FASTIFY_STARTER_REGISTRY",
            "FASTIFY_STARTER_VERSION_TIMEOUT",
            "FASTIFY_STARTER_SKIP_VERSION_CHECK",
            "FASTIFY_STARTER_PACKAGE_MANAGER",
            "FASTIFY_STARTER_COMMAND_TIMEOUT",
            "FASTIFY_STARTER_TEMPLATE_DIR",
        ):
            monkeypatch.delenv(name, raising=False)

        assert Settings.from_env() == Settings()
