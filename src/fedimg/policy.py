"""Policy configuration and enforcement helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from fedimg.errors import PolicyError

NetworkMode = Literal["online", "offline"]


@dataclass(frozen=True, slots=True)
class Policy:
    network_mode: NetworkMode = "online"
    fetch_timeout: float | None = None


@dataclass(frozen=True, slots=True)
class BuildPaths:
    """Fixed in-image locations used by the repository and script stages."""

    repo_dir: str = "/etc/yum.repos.d"
    script_dir: str = "/tmp"
    repo_file_permissions: int = 0o644
    repo_file_owner: str = "root:root"

    def repo_path(self, file_name: str) -> str:
        return f"{self.repo_dir.rstrip('/')}/{file_name}"

    def script_path(self, name: str) -> str:
        return f"{self.script_dir.rstrip('/')}/{name}"


def ensure_network_allowed(*, policy: Policy, operation: str) -> None:
    if policy.network_mode == "offline":
        raise PolicyError(
            "Network operations are disabled by policy.",
            hint="Switch policy.network_mode to 'online' for this operation.",
            context={"operation": operation},
        )
