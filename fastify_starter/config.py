"""fastify-starter configuration.

Typed configuration for the generation pipeline. ``ProjectOptions`` captures
the user's choices for a single project; ``Settings`` holds the tool-level
knobs (registry, timeouts, template location). Both are Pydantic v2 models so
they are validated at construction time.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from fastify_starter.errors import ErrorCategory, ErrorContext, RecoveryPlan, ValidationError

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "template"
DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Database(str, Enum):
    """Database engine the data layer is configured for."""
    SQLITE = "sqlite"
    POSTGRES = "postgres"
    MYSQL = "mysql"


class Orm(str, Enum):
    """Whether the Prisma data-layer package is generated."""
    PRISMA = "prisma"
    NONE = "none"


class Linter(str, Enum):
    """Linting / formatting toolchain."""
    BIOME = "biome"
    ESLINT = "eslint"


# ---------------------------------------------------------------------------
# Project options
# ---------------------------------------------------------------------------


class ProjectOptions(BaseModel):
    """The fully resolved set of choices for one generated project.

    Immutable once built: every conditional branch in customisation and setup
    reads from this object and nothing else.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    database: Database = Field(default=Database.SQLITE)
    orm: Orm = Field(default=Orm.PRISMA)
    linter: Linter = Field(default=Linter.BIOME)
    install_dependencies: bool = Field(default=True)
    init_git: bool = Field(default=True)

    @property
    def uses_orm(self) -> bool:
        return self.orm is Orm.PRISMA

    def describe(self) -> dict[str, str]:
        """Human-readable summary used for the configuration table."""
        return {
            "Database": self.database.value.upper(),
            "ORM": "Prisma" if self.uses_orm else "None",
            "Linter": "Biome" if self.linter is Linter.BIOME else "ESLint",
            "Git": "Yes" if self.init_git else "No",
            "Install": "Yes" if self.install_dependencies else "No",
        }


_OPTION_FIELDS = ("database", "orm", "linter", "install_dependencies", "init_git")


def validate_project_options(values: Mapping[str, Any]) -> ProjectOptions:
    """Validate a raw option mapping into ``ProjectOptions``.

    ``None`` values are treated as "not provided" and fall back to defaults.

    Raises:
        ValidationError: If any value lies outside its enumerated domain or an
            unknown option key is present.
    """
    provided = {key: value for key, value in values.items() if value is not None}
    try:
        return ProjectOptions(**provided)
    except PydanticValidationError as exc:
        problems = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err.get("loc", ())) or "options"
            problems.append(f"{field}: {err.get('msg', 'invalid value')}")
        plan = RecoveryPlan(
            category=ErrorCategory.VALIDATION,
            headline="Invalid project options",
            message="One or more options are not supported",
            steps=[
                "Database must be one of: " + ", ".join(d.value for d in Database),
                "ORM must be one of: " + ", ".join(o.value for o in Orm),
                "Linter must be one of: " + ", ".join(lint.value for lint in Linter),
                "Run with --help to see every available option",
            ],
            context=ErrorContext(operation="Pre-flight check", details="; ".join(problems)),
        )
        raise ValidationError(plan) from exc


PromptFn = Callable[[str, Any], Any]


def merge_options(
    flags: Mapping[str, Any],
    prompt: PromptFn | None = None,
) -> dict[str, Any]:
    """Merge explicit flags with interactively prompted answers.

    Explicit flags always win. ``prompt`` is called as ``prompt(field, default)``
    for every field the flags leave unset; when it is ``None`` the field is
    left as ``None`` and later falls back to its default.  Nothing is
    validated here.
    """
    merged: dict[str, Any] = {}
    defaults = ProjectOptions()
    for field in _OPTION_FIELDS:
        value = flags.get(field)
        if value is None and prompt is not None:
            default = getattr(defaults, field)
            value = prompt(field, default.value if isinstance(default, Enum) else default)
        merged[field] = value
    return merged


def resolve_options(
    flags: Mapping[str, Any],
    prompt: PromptFn | None = None,
) -> ProjectOptions:
    """``merge_options`` followed by ``validate_project_options``."""
    return validate_project_options(merge_options(flags, prompt))


# ---------------------------------------------------------------------------
# Project name
# ---------------------------------------------------------------------------

_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]*$")
_RESERVED_NAMES = frozenset({"node_modules", "favicon.ico"})
MAX_NAME_LENGTH = 214
# Placeholder name used throughout the bundled template.
TEMPLATE_PROJECT_NAME = "fastify-react-router-starter"


def project_name_problems(name: str) -> list[str]:
    """Return every reason *name* is unusable as a directory and package name."""
    problems: list[str] = []
    if not name or not name.strip():
        return ["name cannot be empty"]
    if name != name.strip():
        problems.append("name cannot contain leading or trailing spaces")
    if len(name) > MAX_NAME_LENGTH:
        problems.append(f"name can be no longer than {MAX_NAME_LENGTH} characters")
    if name.startswith((".", "_")):
        problems.append("name cannot start with a period or underscore")
    if name.lower() != name:
        problems.append("name can no longer contain capital letters")
    if name.lower() in _RESERVED_NAMES:
        problems.append(f"{name} is a reserved name")
    if not _NAME_PATTERN.match(name.lower().strip()):
        problems.append("name can only contain lowercase letters, digits, '.', '-' and '_'")
    if TEMPLATE_PROJECT_NAME in name and name != TEMPLATE_PROJECT_NAME:
        problems.append(f"name cannot embed the template placeholder {TEMPLATE_PROJECT_NAME!r}")
    return problems


def validate_project_name(name: str) -> str:
    """Return *name* unchanged if it is valid, else raise ``ValidationError``."""
    problems = project_name_problems(name)
    if problems:
        raise ValidationError(
            RecoveryPlan(
                category=ErrorCategory.VALIDATION,
                headline=f"Invalid project name: {name!r}",
                message="Project names must be valid npm package names",
                steps=[
                    "Use lowercase letters, digits and hyphens, e.g. my-fastify-app",
                    "Do not start the name with a period or underscore",
                ],
                context=ErrorContext(operation="Pre-flight check", details="; ".join(problems)),
            )
        )
    return name


# ---------------------------------------------------------------------------
# Tool settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    """Tool-level configuration shared by every pipeline run."""

    registry_url: str = Field(default=DEFAULT_REGISTRY_URL)
    version_timeout: float = Field(
        default=3.0, gt=0, description="Per-lookup registry timeout in seconds"
    )
    check_versions: bool = Field(default=True)
    package_manager: str = Field(default="pnpm")
    command_timeout: int = Field(
        default=600, ge=1, description="Subprocess timeout in seconds"
    )
    template_dir: Path = Field(default=DEFAULT_TEMPLATE_DIR)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            FASTIFY_STARTER_REGISTRY, FASTIFY_STARTER_VERSION_TIMEOUT,
            FASTIFY_STARTER_SKIP_VERSION_CHECK, FASTIFY_STARTER_PACKAGE_MANAGER,
            FASTIFY_STARTER_COMMAND_TIMEOUT, FASTIFY_STARTER_TEMPLATE_DIR.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("FASTIFY_STARTER_REGISTRY"):
            kwargs["registry_url"] = os.environ["FASTIFY_STARTER_REGISTRY"]
        if os.environ.get("FASTIFY_STARTER_VERSION_TIMEOUT"):
            kwargs["version_timeout"] = float(os.environ["FASTIFY_STARTER_VERSION_TIMEOUT"])
        if os.environ.get("FASTIFY_STARTER_SKIP_VERSION_CHECK", "").lower() in ("1", "true", "yes"):
            kwargs["check_versions"] = False
        if os.environ.get("FASTIFY_STARTER_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["FASTIFY_STARTER_PACKAGE_MANAGER"]
        if os.environ.get("FASTIFY_STARTER_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["FASTIFY_STARTER_COMMAND_TIMEOUT"])
        if os.environ.get("FASTIFY_STARTER_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["FASTIFY_STARTER_TEMPLATE_DIR"])
        return cls(**kwargs)
