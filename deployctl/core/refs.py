"""Resolve the git ref a deploy should ship."""

from __future__ import annotations

from deployctl.core.config import DeployctlConfig
from deployctl.core.errors import DeployArgumentError, DeployArgumentVariant
from deployctl.core.models import Environment


def effective_default_branch(environment: Environment, config: DeployctlConfig) -> str | None:
    """Return the branch the project pins for an environment.

    The project file wins over the value stored in the catalog.
    """
    return config.default_branch(environment.name) or environment.default_branch


def resolve_ref(
    explicit_ref: str | None,
    ignore_default_branch: bool,
    default_branch: str | None,
    current_branch: str | None,
    *,
    app_is_explicit: bool,
) -> str:
    """Return the ref to deploy or raise DeployArgumentError.

    A pinned default branch must be named explicitly unless the caller
    opts out with ``ignore_default_branch``. The local branch is only a
    fallback when the application was inferred from the working directory.
    """
    if default_branch and not ignore_default_branch:
        if not explicit_ref:
            raise DeployArgumentError(
                DeployArgumentVariant.REF_OMITTED,
                default_branch=default_branch,
            )
        if explicit_ref != default_branch:
            raise DeployArgumentError(
                DeployArgumentVariant.REF_CONFLICTS,
                default_branch=default_branch,
                ref=explicit_ref,
            )
    if explicit_ref:
        return explicit_ref
    if app_is_explicit:
        raise DeployArgumentError(DeployArgumentVariant.REF_REQUIRED_WITH_APP)
    if current_branch:
        return current_branch
    raise DeployArgumentError(DeployArgumentVariant.NO_REF_RESOLVABLE)
