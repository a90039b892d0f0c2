"""Failure classification and recovery instructions.

Every failure the pipeline meets (filesystem, network, git, package manager,
validation) is turned into a ``RecoveryPlan``: a headline, a short message,
ordered manual steps and an optional help link.  Classification works on
lower-cased substrings of the raw error text because the tools we shell out
to expose no other error taxonomy.  This module is the only place that kind
of matching happens.

Plans are display content only.  Whether the pipeline continues is decided
by the calling step, never here.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
    """Failure domain a recovery plan belongs to."""
    FILESYSTEM = "filesystem"
    NETWORK = "network"
    VERSION_CONTROL = "version_control"
    PACKAGE_MANAGER = "package_manager"
    VALIDATION = "validation"


class ErrorContext(BaseModel):
    """Where a failure happened."""

    operation: str = Field(..., description="Human-readable step name, e.g. 'Template copying'")
    project_path: Optional[str] = Field(default=None)
    command: Optional[str] = Field(default=None, description="Subprocess command line, if any")
    details: Optional[str] = Field(default=None, description="Raw diagnostic text")


class RecoveryPlan(BaseModel):
    """User-facing description of how to finish a failed step by hand."""

    category: ErrorCategory
    headline: str
    message: str
    steps: list[str] = Field(default_factory=list)
    help_url: Optional[str] = Field(default=None)
    context: Optional[ErrorContext] = Field(default=None)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Raised for failures that stop the pipeline before anything is written."""

    category: ErrorCategory = ErrorCategory.FILESYSTEM

    def __init__(self, plan: RecoveryPlan) -> None:
        self.plan = plan
        super().__init__(plan.headline)


class FilesystemError(ScaffoldError):
    category = ErrorCategory.FILESYSTEM


class NetworkError(ScaffoldError):
    category = ErrorCategory.NETWORK


class VersionControlError(ScaffoldError):
    category = ErrorCategory.VERSION_CONTROL


class PackageManagerError(ScaffoldError):
    category = ErrorCategory.PACKAGE_MANAGER


class ValidationError(ScaffoldError):
    category = ErrorCategory.VALIDATION


ERROR_TYPES: dict[ErrorCategory, type[ScaffoldError]] = {
    ErrorCategory.FILESYSTEM: FilesystemError,
    ErrorCategory.NETWORK: NetworkError,
    ErrorCategory.VERSION_CONTROL: VersionControlError,
    ErrorCategory.PACKAGE_MANAGER: PackageManagerError,
    ErrorCategory.VALIDATION: ValidationError,
}


def error_for(plan: RecoveryPlan) -> ScaffoldError:
    """Wrap *plan* in the exception type matching its category."""
    return ERROR_TYPES[plan.category](plan)


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def _message_of(error: BaseException | str) -> str:
    return str(error).lower()


def _with_details(context: ErrorContext, details: str) -> ErrorContext:
    return context.model_copy(update={"details": details})


def classify_filesystem_error(error: BaseException | str, context: ErrorContext) -> RecoveryPlan:
    """Classify a filesystem failure (disk full, permissions, conflicts)."""
    text = _message_of(error)

    if "enospc" in text or "no space" in text:
        return RecoveryPlan(
            category=ErrorCategory.FILESYSTEM,
            headline="Insufficient disk space",
            message="Disk space is full",
            steps=[
                "Free up disk space by deleting unnecessary files",
                "Check available space with: df -h (Linux/Mac) or dir (Windows)",
                "Try creating the project in a different location with more space",
                "Clear the package store with: pnpm store prune",
            ],
            context=_with_details(context, str(error)),
        )

    if "eacces" in text or "permission" in text:
        return RecoveryPlan(
            category=ErrorCategory.FILESYSTEM,
            headline="Permission denied",
            message="File system permissions issue",
            steps=[
                "Check that you have write permissions to the target directory",
                "Try running from a different directory where you have write access",
                "On Unix systems, check permissions with: ls -la",
                "Avoid using sudo with npm/pnpm; fix the directory permissions instead",
            ],
            help_url="https://docs.npmjs.com/resolving-eacces-permissions-errors-when-installing-packages-globally",
            context=_with_details(context, str(error)),
        )

    if "eexist" in text or "already exists" in text or "file exists" in text:
        return RecoveryPlan(
            category=ErrorCategory.FILESYSTEM,
            headline="File or directory already exists",
            message="Target directory conflicts",
            steps=[
                "Choose a different project name",
                "Remove the existing directory if it is not needed",
                "Move the existing directory to a backup location",
                "Use a subdirectory: mkdir my-projects && cd my-projects",
            ],
            context=_with_details(context, str(error)),
        )

    return RecoveryPlan(
        category=ErrorCategory.FILESYSTEM,
        headline="File system operation failed",
        message="File system error occurred",
        steps=[
            "Check that you have sufficient permissions",
            "Ensure adequate disk space is available",
            "Try creating the project in a different location",
            "Delete the partially created directory and run the command again",
        ],
        context=_with_details(context, str(error)),
    )


def classify_network_error(error: BaseException | str, context: ErrorContext) -> RecoveryPlan:
    """Classify a connectivity failure (DNS, timeout, proxy)."""
    text = _message_of(error)

    if "enotfound" in text or "network" in text:
        return RecoveryPlan(
            category=ErrorCategory.NETWORK,
            headline="Network connection failed",
            message="Network connectivity issues detected",
            steps=[
                "Check your internet connection",
                "Try again in a few moments",
                "If using a corporate network, check proxy settings",
                "Consider using: pnpm config set registry https://registry.npmmirror.com",
                "Or create the project with --no-install and install dependencies later",
            ],
            help_url="https://docs.npmjs.com/troubleshooting/network-issues",
            context=_with_details(context, str(error)),
        )

    if "timeout" in text or "etimedout" in text or "timed out" in text:
        return RecoveryPlan(
            category=ErrorCategory.NETWORK,
            headline="Operation timed out",
            message="Network timeout occurred",
            steps=[
                "Try the operation again later (it might be temporary)",
                "Check if you are behind a firewall or proxy",
                "Increase the timeout with: pnpm config set network-timeout 300000",
                "Or skip this step with --no-install and run it manually later",
            ],
            context=_with_details(context, str(error)),
        )

    if "proxy" in text or "407" in text:
        return RecoveryPlan(
            category=ErrorCategory.NETWORK,
            headline="Proxy authentication failed",
            message="Corporate proxy configuration needed",
            steps=[
                "Contact your IT department for proxy settings",
                "Set proxy with: pnpm config set proxy http://proxy.company.com:8080",
                "Set https-proxy with: pnpm config set https-proxy http://proxy.company.com:8080",
                "Or create the project with --no-install and configure the proxy later",
            ],
            context=_with_details(context, str(error)),
        )

    return RecoveryPlan(
        category=ErrorCategory.NETWORK,
        headline="Network operation failed",
        message="Network issues detected",
        steps=[
            "Check your internet connection",
            "Retry later or skip this step with --no-install",
            "Then run 'pnpm install' manually once the network is stable",
        ],
        context=_with_details(context, str(error)),
    )


def classify_git_error(error: BaseException | str, context: ErrorContext) -> RecoveryPlan:
    """Classify a git failure."""
    text = _message_of(error)

    if "not found" in text or "is not recognized" in text:
        return RecoveryPlan(
            category=ErrorCategory.VERSION_CONTROL,
            headline="Git not installed",
            message="Git installation required",
            steps=[
                "Install Git from: https://git-scm.com/downloads",
                "After installation, restart your terminal",
                "Verify installation with: git --version",
                "Or skip git initialization with --no-git",
            ],
            help_url="https://git-scm.com/book/en/v2/Getting-Started-Installing-Git",
            context=_with_details(context, str(error)),
        )

    if "not a git repository" in text:
        return RecoveryPlan(
            category=ErrorCategory.VERSION_CONTROL,
            headline="Git repository initialization failed",
            message="Git initialization issue",
            steps=[
                "The project was created successfully but git init failed",
                "Initialize git manually with: git init",
                "Then add files with: git add .",
                "And create the initial commit with: git commit -m 'Initial commit'",
            ],
            context=_with_details(context, str(error)),
        )

    return RecoveryPlan(
        category=ErrorCategory.VERSION_CONTROL,
        headline="Git operation failed",
        message="Git error occurred",
        steps=[
            "Check that git is properly installed: git --version",
            "Make sure git user.name and user.email are configured",
            "Initialize git manually: git init && git add . && git commit -m 'Initial commit'",
            "Or skip git initialization with --no-git",
        ],
        context=_with_details(context, str(error)),
    )


def classify_package_manager_error(error: BaseException | str, context: ErrorContext) -> RecoveryPlan:
    """Classify a pnpm failure; network-looking failures are delegated."""
    text = _message_of(error)

    if "command not found" in text or "is not recognized" in text:
        return RecoveryPlan(
            category=ErrorCategory.PACKAGE_MANAGER,
            headline="PNPM not installed",
            message="PNPM installation required",
            steps=[
                "Install PNPM with: npm install -g pnpm",
                "Or using Corepack: corepack enable",
                "Verify installation with: pnpm --version",
                "Then run: pnpm install",
            ],
            help_url="https://pnpm.io/installation",
            context=_with_details(context, str(error)),
        )

    if "peer dep" in text:
        return RecoveryPlan(
            category=ErrorCategory.PACKAGE_MANAGER,
            headline="Peer dependency conflicts",
            message="Dependency resolution issues",
            steps=[
                "This usually resolves automatically; the project should still work",
                "If issues persist, try: pnpm install --force",
                "Or clear the cache and retry: pnpm store prune && pnpm install",
                "Check for version conflicts in package.json files",
            ],
            context=_with_details(context, str(error)),
        )

    if any(marker in text for marker in ("network", "fetch", "enotfound", "timeout", "etimedout")):
        return classify_network_error(error, context)

    return RecoveryPlan(
        category=ErrorCategory.PACKAGE_MANAGER,
        headline="Package installation failed",
        message="Package manager error occurred",
        steps=[
            "Install dependencies manually: pnpm install",
            "Try clearing the package manager cache: pnpm store prune",
            "Delete node_modules and try again: rm -rf node_modules && pnpm install",
            "Check that you have sufficient disk space",
        ],
        context=_with_details(context, str(error)),
    )


def classify_database_error(error: BaseException | str, context: ErrorContext) -> RecoveryPlan:
    """Classify a Prisma generate / push failure."""
    text = _message_of(error)

    if "prisma" in text or "not found" in text:
        return RecoveryPlan(
            category=ErrorCategory.PACKAGE_MANAGER,
            headline="Prisma setup failed",
            message="Prisma database setup encountered issues",
            steps=[
                "The project was created successfully but database setup failed",
                "From the project root run: cp .env.example .env",
                "Then: cp packages/database/.env.example packages/database/.env",
                "cd packages/database",
                "pnpm prisma generate",
                "pnpm prisma db push",
            ],
            help_url="https://www.prisma.io/docs/getting-started/setup-prisma/start-from-scratch",
            context=_with_details(context, str(error)),
        )

    return classify_package_manager_error(error, context)


def validation_plan(missing: list[str], context: ErrorContext) -> RecoveryPlan:
    """Plan for required output files that are missing after generation."""
    return RecoveryPlan(
        category=ErrorCategory.VALIDATION,
        headline="Project created with issues",
        message="Some required files are missing from the generated project",
        steps=[f"Missing: {path}" for path in missing]
        + ["Delete the project directory and run the command again"],
        context=_with_details(context, ", ".join(missing)),
    )


_CLASSIFIERS = {
    ErrorCategory.FILESYSTEM: classify_filesystem_error,
    ErrorCategory.NETWORK: classify_network_error,
    ErrorCategory.VERSION_CONTROL: classify_git_error,
    ErrorCategory.PACKAGE_MANAGER: classify_package_manager_error,
}


def classify(
    error: BaseException | str,
    context: ErrorContext,
    category: ErrorCategory = ErrorCategory.FILESYSTEM,
) -> RecoveryPlan:
    """Map a raw failure and its context to a ``RecoveryPlan``.

    Args:
        error: The exception or raw error text (e.g. a subprocess's stderr).
        context: Operation context; always attached to the resulting plan.
        category: Failure domain that selects the specialised classifier.
    """
    if category is ErrorCategory.VALIDATION:
        return validation_plan([str(error)], context)
    return _CLASSIFIERS[category](error, context)
