"""fastify-starter pipeline orchestrator.

Turns a project name and a set of options into a ready-to-run monorepo:

    PreflightCheck  -- name, options, target and parent directory checks.
    DirectoryCreate -- create the (new, empty) project directory.
    Materialize     -- copy the packaged template, minus excluded entries.
    Customize       -- rename tokens and apply database / ORM / linter edits.
    VersionResolve  -- refresh core dependency versions from the registry.
    Install         -- ``pnpm install`` followed by a best-effort format pass.
    DatabaseSetup   -- ``.env`` plus ``prisma generate`` / ``prisma db push``.
    GitInit         -- initial commit.
    Validate        -- required files exist; decides the terminal state.

Preflight and directory creation are the only steps allowed to stop a run;
every later failure is classified into a recovery plan and recorded on the
report while the pipeline carries on.

Usage::

    create-fastify-starter my-app --db postgres --lint eslint
    python -m fastify_starter my-app --orm none --no-install --yes
"""

from __future__ import annotations

import asyncio
import os
import shutil
import sys
import time
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field
from rich.panel import Panel

from fastify_starter.config import (
    Database,
    Linter,
    Orm,
    ProjectOptions,
    Settings,
    merge_options,
    validate_project_name,
    validate_project_options,
)
from fastify_starter.errors import (
    ErrorContext,
    FilesystemError,
    RecoveryPlan,
    ScaffoldError,
    classify_database_error,
    classify_filesystem_error,
    classify_git_error,
    classify_package_manager_error,
    error_for,
    validation_plan,
)
from fastify_starter.scaffolder import TemplateCustomizer, ensure_data_placeholder, materialize
from fastify_starter.utils import (
    command_output,
    console,
    create_progress,
    format_duration,
    print_error,
    print_info,
    print_recovery_plan,
    print_steps,
    print_success,
    print_summary_table,
    print_title,
    print_warning,
    run_command,
)
from fastify_starter.versions import (
    VersionInfo,
    VersionResolver,
    VersionUpdateSummary,
    update_project_versions,
)

DISK_USAGE_WARNING_RATIO = 0.95
PROXY_ENV_VARS: tuple[str, ...] = ("HTTP_PROXY", "HTTPS_PROXY", "http_proxy", "https_proxy")
CI_ENV_VARS: tuple[str, ...] = ("CI", "CONTINUOUS_INTEGRATION", "GITHUB_ACTIONS", "GITLAB_CI")
# Prisma reads .env from its own package, not the workspace root.
ENV_DIRECTORIES: tuple[str, ...] = (".", "packages/database")

BASE_REQUIRED_FILES: tuple[str, ...] = (
    "package.json",
    "apps/api/package.json",
    "apps/web/package.json",
)
ORM_REQUIRED_FILES: tuple[str, ...] = (
    "packages/database/package.json",
    "packages/database/prisma/schema.prisma",
)


# ---------------------------------------------------------------------------
# Report model
# ---------------------------------------------------------------------------


class Step(str, Enum):
    PREFLIGHT = "preflight"
    CREATE_DIRECTORY = "create_directory"
    MATERIALIZE = "materialize"
    CUSTOMIZE = "customize"
    RESOLVE_VERSIONS = "resolve_versions"
    INSTALL = "install"
    DATABASE_SETUP = "database_setup"
    GIT_INIT = "git_init"
    VALIDATE = "validate"


class StepStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class PipelineStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    REJECTED = "rejected"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """One user-facing message emitted during a run."""

    severity: Severity
    message: str
    steps: list[str] = Field(default_factory=list)


class PipelineReport(BaseModel):
    """Everything a run decided, independent of what was printed."""

    project_name: str
    project_path: str
    status: PipelineStatus = PipelineStatus.SUCCESS
    steps: dict[Step, StepStatus] = Field(default_factory=dict)
    notices: list[Notice] = Field(default_factory=list)
    recovery_plans: list[RecoveryPlan] = Field(default_factory=list)
    manual_steps: list[str] = Field(default_factory=list)
    version_updates: list[VersionInfo] = Field(default_factory=list)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.status is PipelineStatus.SUCCESS

    def failed_steps(self) -> list[Step]:
        return [step for step, status in self.steps.items() if status is StepStatus.FAILED]


# Failures of these steps turn the terminal state into a partial failure.
GATING_STEPS: frozenset[Step] = frozenset({
    Step.MATERIALIZE,
    Step.CUSTOMIZE,
    Step.INSTALL,
    Step.DATABASE_SETUP,
})


# ---------------------------------------------------------------------------
# Environment checks
# ---------------------------------------------------------------------------


def check_filesystem_health(directory: Path) -> tuple[bool, list[str]]:
    """Return ``(can_write, advisory_issues)`` for the directory a project goes into."""
    if not directory.is_dir() or not os.access(directory, os.W_OK):
        return False, [f"Cannot write to directory: {directory}"]

    issues: list[str] = []
    try:
        usage = shutil.disk_usage(directory)
    except OSError:
        return True, issues
    if usage.total and usage.used / usage.total > DISK_USAGE_WARNING_RATIO:
        issues.append("Disk space is critically low (>95% used)")
    return True, issues


def check_network_environment(environ: Mapping[str, str] | None = None) -> list[str]:
    """Notes about proxies or CI runners that may affect installation."""
    env = os.environ if environ is None else environ
    notes: list[str] = []

    proxies = [name for name in PROXY_ENV_VARS if env.get(name)]
    if proxies:
        notes.append(
            f"Proxy configuration detected ({', '.join(proxies)}); "
            "package installation will go through it"
        )
    if any(env.get(name) for name in CI_ENV_VARS):
        notes.append("CI environment detected; consider --no-install if the network is restricted")
    return notes


def required_files(options: ProjectOptions) -> list[str]:
    """Files every generated project must contain for *options*."""
    files = list(BASE_REQUIRED_FILES)
    if options.uses_orm:
        files.extend(ORM_REQUIRED_FILES)
    return files


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives one project generation from preflight to validation.

    Attributes:
        project_name: Directory and package name of the new project.
        project_path: Absolute path of the project directory.
        settings: Tool-level configuration.
        report: Accumulates every step status, notice and recovery plan.
    """

    def __init__(
        self,
        project_name: str,
        options: ProjectOptions | Mapping[str, Any],
        settings: Settings | None = None,
        cwd: str | Path | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.project_name = project_name
        self.settings = settings or Settings()
        self.project_path = (Path(cwd) if cwd else Path.cwd()).resolve() / project_name
        self.http_client = http_client
        self._raw_options = options
        self.options: Optional[ProjectOptions] = (
            options if isinstance(options, ProjectOptions) else None
        )
        self.report = PipelineReport(
            project_name=project_name,
            project_path=str(self.project_path),
        )

    # ------------------------------------------------------------------
    # Report helpers
    # ------------------------------------------------------------------

    def _notify(self, severity: Severity, message: str, steps: list[str] | None = None) -> None:
        self.report.notices.append(Notice(severity=severity, message=message, steps=steps or []))
        if severity is Severity.SUCCESS:
            print_success(f"  {message}")
        elif severity is Severity.WARNING:
            print_warning(f"  {message}")
        elif severity is Severity.ERROR:
            print_error(f"  {message}")
        else:
            print_info(f"  {message}")
        if steps:
            print_steps(steps)

    def _mark(self, step: Step, status: StepStatus) -> None:
        self.report.steps[step] = status

    def _fail(self, step: Step, plan: RecoveryPlan) -> None:
        self._mark(step, StepStatus.FAILED)
        self.report.recovery_plans.append(plan)
        print_recovery_plan(plan)

    def _context(self, operation: str, command: list[str] | None = None) -> ErrorContext:
        return ErrorContext(
            operation=operation,
            project_path=str(self.project_path),
            command=" ".join(command) if command else None,
        )

    async def _guarded(self, step: Step, action: Callable[[], Awaitable[None]]) -> bool:
        """Run a post-creation step, recording a raised ``ScaffoldError`` as its failure."""
        try:
            await action()
        except ScaffoldError as exc:
            self._fail(step, exc.plan)
            return False
        return True

    async def _run(self, description: str, cmd: list[str], cwd: Path) -> tuple[int, str, str]:
        with create_progress() as progress:
            progress.add_task(description, total=None)
            return await run_command(cmd, cwd=cwd, timeout=self.settings.command_timeout)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def run(self) -> PipelineReport:
        """Execute every step and return the final report.

        Never raises for step failures: a rejected preflight produces a
        ``rejected`` report and leaves the filesystem untouched.
        """
        start = time.monotonic()

        try:
            await self.preflight()
            await self.create_directory()
        except ScaffoldError as exc:
            step = Step.PREFLIGHT if Step.PREFLIGHT not in self.report.steps else Step.CREATE_DIRECTORY
            self._fail(step, exc.plan)
            self.report.status = PipelineStatus.REJECTED
            self.report.duration = time.monotonic() - start
            return self.report

        assert self.options is not None
        self._print_configuration()

        if await self.materialize():
            await self.customize()
            await self.resolve_versions()

            installed = False
            if self.options.install_dependencies:
                installed = await self._guarded(Step.INSTALL, self.install)
            else:
                self._mark(Step.INSTALL, StepStatus.SKIPPED)

            if self.options.uses_orm and installed:
                await self._guarded(Step.DATABASE_SETUP, self.setup_database)
            else:
                self._mark(Step.DATABASE_SETUP, StepStatus.SKIPPED)
                if self.options.uses_orm:
                    self._notify(
                        Severity.WARNING,
                        "Skipping database setup (dependencies not installed)",
                    )

            if self.options.init_git:
                if not await self._guarded(Step.GIT_INIT, self.init_git):
                    self._notify(Severity.WARNING, "Git initialization failed (this is not critical)")
            else:
                self._mark(Step.GIT_INIT, StepStatus.SKIPPED)
        else:
            for step in (
                Step.CUSTOMIZE,
                Step.RESOLVE_VERSIONS,
                Step.INSTALL,
                Step.DATABASE_SETUP,
                Step.GIT_INIT,
            ):
                self._mark(step, StepStatus.SKIPPED)

        valid = self.validate()
        gating_failures = [step for step in self.report.failed_steps() if step in GATING_STEPS]
        if valid and not gating_failures:
            self.report.status = PipelineStatus.SUCCESS
        else:
            self.report.status = PipelineStatus.PARTIAL_FAILURE
            self.report.manual_steps = self.manual_setup_steps()

        self.report.duration = time.monotonic() - start
        self._print_final_summary()
        return self.report

    # ------------------------------------------------------------------
    # PreflightCheck / DirectoryCreate
    # ------------------------------------------------------------------

    async def preflight(self) -> None:
        """Validate inputs and the target location.

        Raises:
            ValidationError: Invalid project name or options.
            FilesystemError: Target exists or its parent is not writable.
        """
        validate_project_name(self.project_name)
        if self.options is None:
            self.options = validate_project_options(self._raw_options)

        if self.project_path.exists():
            raise FilesystemError(
                classify_filesystem_error(
                    f"EEXIST: directory {self.project_path} already exists",
                    self._context("Pre-flight check"),
                )
            )

        can_write, issues = check_filesystem_health(self.project_path.parent)
        if not can_write:
            raise FilesystemError(
                classify_filesystem_error(
                    f"EACCES: permission denied, {self.project_path.parent}",
                    self._context("Pre-flight check"),
                )
            )

        self._mark(Step.PREFLIGHT, StepStatus.COMPLETED)
        for issue in issues:
            self._notify(Severity.WARNING, issue)
        for note in check_network_environment():
            self._notify(Severity.INFO, note)

    async def create_directory(self) -> None:
        """Create the empty project directory.

        Raises:
            FilesystemError: The directory could not be created.
        """
        try:
            self.project_path.mkdir(parents=True, exist_ok=False)
        except OSError as exc:
            raise FilesystemError(
                classify_filesystem_error(exc, self._context("Directory creation"))
            ) from exc
        self._mark(Step.CREATE_DIRECTORY, StepStatus.COMPLETED)

    # ------------------------------------------------------------------
    # Materialize / Customize
    # ------------------------------------------------------------------

    async def materialize(self) -> bool:
        """Copy the template into the project directory."""
        try:
            copied = await asyncio.to_thread(
                materialize, self.settings.template_dir, self.project_path
            )
            await asyncio.to_thread(ensure_data_placeholder, self.project_path)
        except OSError as exc:
            self._fail(Step.MATERIALIZE, classify_filesystem_error(exc, self._context("Template copying")))
            return False

        self._mark(Step.MATERIALIZE, StepStatus.COMPLETED)
        self._notify(Severity.SUCCESS, f"Project template copied ({len(copied)} files)")
        return True

    async def customize(self) -> bool:
        """Apply token replacement and the option-specific edits."""
        assert self.options is not None
        customizer = TemplateCustomizer(self.project_path, self.project_name, self.options)
        try:
            result = await asyncio.to_thread(customizer.customize)
        except OSError as exc:
            self._fail(
                Step.CUSTOMIZE,
                classify_filesystem_error(exc, self._context("Template customization")),
            )
            return False

        self._mark(Step.CUSTOMIZE, StepStatus.COMPLETED)
        for warning in result.warnings:
            self._notify(Severity.WARNING, warning)
        self._notify(
            Severity.SUCCESS,
            f"Template customized ({result.files_changed} of {result.files_processed} files updated)",
        )
        return True

    # ------------------------------------------------------------------
    # VersionResolve
    # ------------------------------------------------------------------

    async def resolve_versions(self) -> None:
        """Refresh core dependency versions; never fatal."""
        if not self.settings.check_versions:
            self._mark(Step.RESOLVE_VERSIONS, StepStatus.SKIPPED)
            return

        try:
            if self.http_client is not None:
                summary = await self._update_versions(self.http_client)
            else:
                async with httpx.AsyncClient(timeout=self.settings.version_timeout) as client:
                    summary = await self._update_versions(client)
        except OSError as exc:
            self._mark(Step.RESOLVE_VERSIONS, StepStatus.FAILED)
            self._notify(Severity.WARNING, f"Could not update package versions: {exc}")
            return

        self._mark(Step.RESOLVE_VERSIONS, StepStatus.COMPLETED)
        if summary.offline:
            self._notify(
                Severity.INFO,
                "Unable to check for latest versions (offline?); using template defaults",
            )
        elif summary.updates:
            self.report.version_updates = summary.updates
            self._notify(
                Severity.SUCCESS,
                f"Updated {len(summary.updates)} dependencies to latest compatible versions",
                [
                    f"{info.name}: {info.current_version} -> {info.latest_version}"
                    for info in summary.updates
                ],
            )
        else:
            self._notify(Severity.INFO, "All core dependencies are already up to date")

    async def _update_versions(self, client: httpx.AsyncClient) -> VersionUpdateSummary:
        resolver = VersionResolver(
            registry_url=self.settings.registry_url,
            timeout=self.settings.version_timeout,
            client=client,
        )
        with create_progress() as progress:
            progress.add_task("Checking for latest package versions...", total=None)
            return await update_project_versions(self.project_path, resolver)

    # ------------------------------------------------------------------
    # Install / DatabaseSetup / GitInit
    # ------------------------------------------------------------------

    async def install(self) -> None:
        """``pnpm install`` followed by a non-critical ``pnpm format``.

        Raises:
            ScaffoldError: The install command failed.
        """
        pm = self.settings.package_manager
        cmd = [pm, "install"]
        rc, stdout, stderr = await self._run("Installing dependencies...", cmd, self.project_path)
        if rc != 0:
            raise error_for(
                classify_package_manager_error(
                    command_output(stdout, stderr),
                    self._context("Dependency installation", cmd),
                )
            )

        self._mark(Step.INSTALL, StepStatus.COMPLETED)
        self._notify(Severity.SUCCESS, "Dependencies installed")

        rc, _, _ = await self._run("Formatting generated code...", [pm, "format"], self.project_path)
        if rc != 0:
            self._notify(Severity.WARNING, "Could not format generated code (this is usually not critical)")

    async def setup_database(self) -> None:
        """Create the ``.env`` files and generate the Prisma client.

        Raises:
            ScaffoldError: An ``.env`` file could not be written or a Prisma
                command failed.
        """
        assert self.options is not None
        try:
            for rel_dir in ENV_DIRECTORIES:
                env_example = self.project_path / rel_dir / ".env.example"
                env_file = self.project_path / rel_dir / ".env"
                if env_example.is_file() and not env_file.exists():
                    shutil.copyfile(env_example, env_file)
        except OSError as exc:
            raise error_for(
                classify_filesystem_error(exc, self._context("Database setup"))
            ) from exc

        pm = self.settings.package_manager
        database_dir = self.project_path / "packages" / "database"
        commands = [[pm, "prisma", "generate"]]
        if self.options.database is Database.SQLITE:
            commands.append([pm, "prisma", "db", "push"])

        for cmd in commands:
            rc, stdout, stderr = await self._run(f"Running {' '.join(cmd[1:])}...", cmd, database_dir)
            if rc != 0:
                raise error_for(
                    classify_database_error(
                        command_output(stdout, stderr),
                        self._context("Database setup", cmd),
                    )
                )

        self._mark(Step.DATABASE_SETUP, StepStatus.COMPLETED)
        if self.options.database is Database.SQLITE:
            self._notify(Severity.SUCCESS, "SQLite database created and schema pushed")
        else:
            self._notify(
                Severity.INFO,
                f"Prisma client generated. Finish {self.options.database.value} setup manually:",
                self._external_database_steps(),
            )

    async def init_git(self) -> None:
        """Create the repository with an initial commit.

        Raises:
            VersionControlError: A git command failed.
        """
        commands = (
            ["git", "init"],
            ["git", "add", "."],
            ["git", "commit", "-m", "Initial commit"],
        )
        for cmd in commands:
            rc, stdout, stderr = await self._run(f"Running {' '.join(cmd[:2])}...", cmd, self.project_path)
            if rc != 0:
                raise error_for(
                    classify_git_error(
                        command_output(stdout, stderr),
                        self._context("Git initialization", cmd),
                    )
                )

        self._mark(Step.GIT_INIT, StepStatus.COMPLETED)
        self._notify(Severity.SUCCESS, "Git repository initialized")

    # ------------------------------------------------------------------
    # Validate
    # ------------------------------------------------------------------

    def validate(self) -> bool:
        """Check that every required file exists; the terminal state follows from it."""
        assert self.options is not None
        missing = [
            rel for rel in required_files(self.options)
            if not (self.project_path / rel).is_file()
        ]
        if missing:
            self._fail(Step.VALIDATE, validation_plan(missing, self._context("Project validation")))
            return False
        self._mark(Step.VALIDATE, StepStatus.COMPLETED)
        return True

    # ------------------------------------------------------------------
    # Guidance
    # ------------------------------------------------------------------

    def _external_database_steps(self) -> list[str]:
        assert self.options is not None
        return [
            f"Start your {self.options.database.value} server",
            "Update DATABASE_URL in .env and packages/database/.env with your connection details",
            "cd packages/database && pnpm prisma db push",
        ]

    def manual_setup_steps(self) -> list[str]:
        """Commands that finish by hand whatever the pipeline could not."""
        assert self.options is not None
        steps = self.report.steps
        install_done = steps.get(Step.INSTALL) is StepStatus.COMPLETED
        database_done = steps.get(Step.DATABASE_SETUP) is StepStatus.COMPLETED
        git_missing = self.options.init_git and steps.get(Step.GIT_INIT) is not StepStatus.COMPLETED

        manual = [f"cd {self.project_name}"]
        if not install_done:
            manual.append(f"{self.settings.package_manager} install")
        if self.options.uses_orm and not database_done:
            manual.extend([
                "cp .env.example .env",
                "cp packages/database/.env.example packages/database/.env",
            ])
            if self.options.database is not Database.SQLITE:
                manual.append("# Update DATABASE_URL in .env and packages/database/.env")
            manual.extend([
                "cd packages/database",
                f"{self.settings.package_manager} prisma generate",
                f"{self.settings.package_manager} prisma db push",
                "cd ../..",
            ])
        if git_missing:
            manual.extend(["git init", "git add .", 'git commit -m "Initial commit"'])
        manual.append(f"{self.settings.package_manager} dev")
        return manual

    def next_steps(self) -> list[str]:
        assert self.options is not None
        pm = self.settings.package_manager
        steps = [f"cd {self.project_name}"]
        if not self.options.install_dependencies:
            steps.append(f"{pm} install")
        if self.options.uses_orm and self.options.database is not Database.SQLITE:
            steps.extend(self._external_database_steps())
        steps.append(f"{pm} dev")
        return steps

    def included_features(self) -> list[str]:
        assert self.options is not None
        features = [
            "Fastify API server (apps/api)",
            "React Router 7 web app (apps/web)",
            "Turborepo task pipeline",
            "Shared TypeScript configuration",
        ]
        if self.options.uses_orm:
            features.append(f"Prisma ORM with {self.options.database.value}")
        features.append(
            "Biome for linting and formatting"
            if self.options.linter is Linter.BIOME
            else "ESLint + Prettier for linting and formatting"
        )
        return features

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _print_configuration(self) -> None:
        assert self.options is not None
        print_title(f"Creating {self.project_name}")
        print_summary_table(
            {"Project": self.project_name, "Location": str(self.project_path), **self.options.describe()},
            title="Configuration",
        )

    def _print_final_summary(self) -> None:
        """Print the final summary panel."""
        pm = self.settings.package_manager
        if self.report.success:
            lines = [
                f"[bold green]Project {self.project_name} created successfully![/bold green]",
                "",
                "[bold]What's included:[/bold]",
                *(f"  - {feature}" for feature in self.included_features()),
                "",
                "[bold]Next steps:[/bold]",
                *(f"  {index}. {step}" for index, step in enumerate(self.next_steps(), start=1)),
                "",
                "[bold]Useful commands:[/bold]",
                f"  {pm} dev      Start the API and web app",
                f"  {pm} build    Build every package",
                f"  {pm} lint     Lint the workspace",
                "",
                f"Duration : {format_duration(self.report.duration)}",
            ]
            border_style = "bold green"
        else:
            failed = ", ".join(step.value for step in self.report.failed_steps()) or "none"
            lines = [
                f"[bold yellow]Project {self.project_name} created with issues[/bold yellow]",
                "",
                f"Failed steps : {failed}",
                "",
                "[bold]Finish the setup manually:[/bold]",
                *(f"  {index}. {step}" for index, step in enumerate(self.report.manual_steps, start=1)),
                "",
                f"Duration : {format_duration(self.report.duration)}",
            ]
            border_style = "bold yellow"

        console.print()
        console.print(Panel("\n".join(lines), title="[bold]fastify-starter[/bold]", border_style=border_style))


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="create-fastify-starter",
        description="Create a Fastify + React Router monorepo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-fastify-starter my-app\n"
            "  create-fastify-starter my-app --db postgres --lint eslint\n"
            "  create-fastify-starter my-app --orm none --no-install --no-git --yes\n"
        ),
    )
    parser.add_argument("project_name", nargs="?", help="Name of the project directory")
    parser.add_argument(
        "--db",
        dest="database",
        choices=[d.value for d in Database],
        default=None,
        help="Database engine (default: sqlite)",
    )
    parser.add_argument(
        "--orm",
        choices=[o.value for o in Orm],
        default=None,
        help="ORM for the data layer (default: prisma)",
    )
    parser.add_argument(
        "--lint",
        dest="linter",
        choices=[lint.value for lint in Linter],
        default=None,
        help="Linting / formatting toolchain (default: biome)",
    )
    parser.add_argument(
        "--no-install",
        dest="install_dependencies",
        action="store_const",
        const=False,
        default=None,
        help="Skip dependency installation",
    )
    parser.add_argument(
        "--no-git",
        dest="init_git",
        action="store_const",
        const=False,
        default=None,
        help="Skip git initialization",
    )
    parser.add_argument(
        "--skip-version-check",
        action="store_true",
        help="Keep the template's dependency versions",
    )
    parser.add_argument("--registry", default=None, help="npm registry URL for version lookups")
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Use defaults for every option not given on the command line",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``create-fastify-starter``."""
    from fastify_starter.prompts import ask_option, ask_project_name

    args = build_parser().parse_args(argv)
    interactive = not args.yes and sys.stdin.isatty()

    project_name = args.project_name
    if not project_name:
        if not interactive:
            console.print("[bold red]Error:[/bold red] A project name is required")
            sys.exit(1)
        project_name = ask_project_name()

    flags = {
        "database": args.database,
        "orm": args.orm,
        "linter": args.linter,
        "install_dependencies": args.install_dependencies,
        "init_git": args.init_git,
    }
    options = merge_options(flags, ask_option if interactive else None)

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid environment configuration: {exc}")
        sys.exit(1)
    overrides: dict[str, Any] = {}
    if args.skip_version_check:
        overrides["check_versions"] = False
    if args.registry:
        overrides["registry_url"] = args.registry
    if overrides:
        settings = settings.model_copy(update=overrides)

    pipeline = Pipeline(project_name, options, settings=settings)
    report = asyncio.run(pipeline.run())
    if not report.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
