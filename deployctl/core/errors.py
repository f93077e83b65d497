"""Typed errors raised while resolving and running a command."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class DeployctlError(Exception):
    """Base class for every error reported to the user with a non-zero exit."""


class CatalogError(DeployctlError):
    """Raised when a catalog snapshot payload is malformed."""


class ConfigError(DeployctlError):
    """Raised when project or process configuration is invalid."""


class NotFoundError(DeployctlError):
    """Raised when no candidate matches a name."""

    kind = "resource"

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"No {self.kind} found matching '{name}'.")


class NoAppError(NotFoundError):
    """Raised when no application matches a name or the local repository."""

    kind = "application"

    @classmethod
    def for_repo(cls, repo_urls: Iterable[str]) -> NoAppError:
        """Build the error for a working directory with no matching application."""
        urls = sorted(repo_urls)
        if not urls:
            return cls(
                "",
                "No application found: this directory has no git remotes. "
                "Use --app to name the application explicitly.",
            )
        listing = "\n".join(f"\t{url}" for url in urls)
        return cls(
            "",
            "No application found for this git repository. Remote URLs checked:\n"
            f"{listing}\nUse --app to name the application explicitly.",
        )


class NoEnvironmentError(NotFoundError):
    """Raised when no environment matches a name or an application has none."""

    kind = "environment"

    @classmethod
    def for_app(cls, app_name: str) -> NoEnvironmentError:
        """Build the error for an application without linked environments."""
        return cls("", f"Application '{app_name}' is not linked to any environment.")


class AmbiguousNameError(DeployctlError):
    """Raised when a name matches more than one candidate."""

    def __init__(self, kind: str, name: str, candidates: Iterable[str]) -> None:
        self.kind = kind
        self.name = name
        self.candidates = sorted(candidates)
        listing = "\n".join(f"\t{item}" for item in self.candidates)
        super().__init__(
            f"The name '{name}' is ambiguous; it matches multiple {kind}s:\n{listing}\n"
            f"Please use a longer, unambiguous {kind} name."
        )


class AmbiguousApplicationError(DeployctlError):
    """Raised when the local repository matches several applications."""

    def __init__(self, repo_urls: Iterable[str], candidates: Iterable[str]) -> None:
        self.repo_urls = sorted(repo_urls)
        self.candidates = sorted(candidates)
        listing = "\n".join(f"\t{item}" for item in self.candidates)
        super().__init__(
            "This git repository matches multiple applications:\n"
            f"{listing}\nUse --app to choose one."
        )


class AmbiguousEnvironmentError(DeployctlError):
    """Raised when an implicit environment lookup finds several environments."""

    def __init__(self, app_name: str, candidates: Iterable[str]) -> None:
        self.app_name = app_name
        self.candidates = sorted(candidates)
        listing = "\n".join(f"\t{item}" for item in self.candidates)
        super().__init__(
            f"Application '{app_name}' is in multiple environments:\n{listing}\n"
            "Use --environment to choose one."
        )


class EnvironmentUnlinkedError(DeployctlError):
    """Raised when an environment exists but is not linked to the application."""

    def __init__(self, env_name: str, app_name: str | None = None) -> None:
        self.env_name = env_name
        self.app_name = app_name
        target = f"application '{app_name}'" if app_name else "this application"
        super().__init__(
            f"Environment '{env_name}' exists but does not run {target}. "
            "Link the application to the environment before deploying."
        )


class DeployArgumentVariant(str, Enum):
    """Reasons a git ref could not be resolved for a deploy."""

    REF_OMITTED = "ref_omitted"
    REF_CONFLICTS = "ref_conflicts"
    REF_REQUIRED_WITH_APP = "ref_required_with_app"
    NO_REF_RESOLVABLE = "no_ref_resolvable"


class DeployArgumentError(DeployctlError):
    """Raised when the deploy ref policy is violated."""

    def __init__(
        self,
        variant: DeployArgumentVariant,
        *,
        default_branch: str | None = None,
        ref: str | None = None,
    ) -> None:
        self.variant = variant
        self.default_branch = default_branch
        self.ref = ref
        super().__init__(_deploy_argument_message(variant, default_branch, ref))


def _deploy_argument_message(
    variant: DeployArgumentVariant,
    default_branch: str | None,
    ref: str | None,
) -> str:
    if variant is DeployArgumentVariant.REF_OMITTED:
        return (
            f"This environment deploys '{default_branch}' by default; "
            f"pass --ref {default_branch} to confirm it, "
            "or --ignore-default-branch to deploy something else."
        )
    if variant is DeployArgumentVariant.REF_CONFLICTS:
        return (
            f"Ref '{ref}' differs from the default branch '{default_branch}'. "
            "Use --ignore-default-branch to force this deploy."
        )
    if variant is DeployArgumentVariant.REF_REQUIRED_WITH_APP:
        return (
            "When specifying the application, you must also specify the ref to deploy\n"
            "Usage: deployctl deploy --app <app name> --ref <branch|tag|ref>"
        )
    return (
        "No git ref to deploy: the current branch could not be determined. "
        "Use --ref to name a branch, tag, or SHA."
    )


class NoInstancesError(DeployctlError):
    """Raised when the role selection matches no instance."""

    def __init__(self, env_name: str) -> None:
        self.env_name = env_name
        super().__init__(f"The environment '{env_name}' does not have any matching instances.")


class NoCommandError(DeployctlError):
    """Raised when an interactive session would target more than one host."""

    def __init__(self) -> None:
        super().__init__("Must specify a command to run via ssh on more than one server.")


class OperationFailedError(DeployctlError):
    """Raised when the control plane reports a failed operation."""

    def __init__(self, operation: str, env_name: str, app_name: str | None = None) -> None:
        self.operation = operation
        self.env_name = env_name
        self.app_name = app_name
        target = f"'{app_name}' in '{env_name}'" if app_name else f"'{env_name}'"
        super().__init__(f"{operation.capitalize()} failed for {target}.")
