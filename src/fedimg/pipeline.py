"""Sequential build pipeline over an immutable container state.

Stages run in a fixed order. Each stage receives the state produced by the
previous one and returns a new state; the first raised error aborts the run
and no partial state is returned.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fedimg.containers import ContainerT
from fedimg.errors import FedimgError
from fedimg.fetch import Fetcher, http_get
from fedimg.models import BuildSpec
from fedimg.observability import StructuredLogger
from fedimg.packages import PACKAGES_STAGE, select_package_manager
from fedimg.policy import BuildPaths
from fedimg.repos import install_repos, remove_repos
from fedimg.scripts import cleanup_scripts, run_scripts

STAGE_ORDER: tuple[str, ...] = (
    "directories",
    "files",
    "repos_install",
    "scripts_pre",
    "exec_pre",
    PACKAGES_STAGE,
    "repos_remove",
    "scripts_post",
    "scripts_cleanup",
    "exec_post",
    "labels",
)


@dataclass(frozen=True, slots=True)
class PipelineStage:
    name: str
    apply: Callable[[Any], Any]


def plan_stages(
    spec: BuildSpec,
    *,
    fetcher: Fetcher = http_get,
    paths: BuildPaths | None = None,
    logger: StructuredLogger | None = None,
) -> tuple[PipelineStage, ...]:
    """Return the stages that apply to ``spec``, in execution order."""
    paths = paths or BuildPaths()

    def directories(container: ContainerT) -> ContainerT:
        for mount in spec.directories:
            container = container.with_directory(mount.destination, mount.source)
        return container

    def files(container: ContainerT) -> ContainerT:
        for mount in spec.files:
            container = container.with_file(mount.destination, mount.source)
        return container

    def exec_commands(commands: tuple[tuple[str, ...], ...]) -> Callable[[Any], Any]:
        def run(container: ContainerT) -> ContainerT:
            for argv in commands:
                container = container.with_exec(argv)
            return container

        return run

    def packages(container: ContainerT) -> ContainerT:
        manager = select_package_manager(container)
        if logger is not None:
            logger.log(
                operation="package_manager_selected",
                stage=PACKAGES_STAGE,
                resource=manager.name,
                message="Selected package manager backend.",
            )
        return manager.apply(container, spec, logger=logger)

    def labels(container: ContainerT) -> ContainerT:
        for label in spec.labels:
            container = container.with_label(label.name, label.value)
        return container

    stages = [
        PipelineStage("directories", directories),
        PipelineStage("files", files),
    ]
    if spec.repos:
        stages.append(
            PipelineStage(
                "repos_install",
                lambda c: install_repos(c, spec.repos, fetcher=fetcher, paths=paths),
            )
        )
    if spec.scripts_pre:
        stages.append(
            PipelineStage("scripts_pre", lambda c: run_scripts(c, spec.scripts_pre, paths=paths))
        )
    stages.append(PipelineStage("exec_pre", exec_commands(spec.exec_pre)))
    if spec.has_package_operations:
        stages.append(PipelineStage(PACKAGES_STAGE, packages))
    stages.append(PipelineStage("repos_remove", lambda c: remove_repos(c, spec.repos, paths=paths)))
    if spec.scripts_post:
        stages.append(
            PipelineStage("scripts_post", lambda c: run_scripts(c, spec.scripts_post, paths=paths))
        )
    if spec.scripts:
        stages.append(
            PipelineStage(
                "scripts_cleanup",
                lambda c: cleanup_scripts(c, spec.scripts, paths=paths),
            )
        )
    stages.append(PipelineStage("exec_post", exec_commands(spec.exec_post)))
    stages.append(PipelineStage("labels", labels))
    return tuple(stages)


def execute(
    spec: BuildSpec,
    container: ContainerT,
    *,
    fetcher: Fetcher = http_get,
    paths: BuildPaths | None = None,
    logger: StructuredLogger | None = None,
) -> ContainerT:
    """Run every applicable stage against ``container`` and return the final state."""
    for stage in plan_stages(spec, fetcher=fetcher, paths=paths, logger=logger):
        if logger is not None:
            logger.log(operation="stage_start", stage=stage.name, message="Starting stage.")
        try:
            container = stage.apply(container)
        except FedimgError as exc:
            exc.annotate(stage=stage.name)
            if logger is not None:
                logger.record_error(
                    exc,
                    operation="stage_failed",
                    stage=stage.name,
                    message="Stage failed; aborting build.",
                )
            raise
        if logger is not None:
            logger.log(operation="stage_complete", stage=stage.name, message="Completed stage.")
    return container
