import json
from pathlib import Path
from typing import Any

import pytest

from fedimg import Image
from fedimg.compiler import emit_containerfile, render_containerfile
from fedimg.containers import ContainerfileContainer, InProcessContainer, PodmanRuntime
from fedimg.errors import ExecutionError, ValidationError


def test_render_golden_output(tmp_path: Path) -> None:
    app_dir = tmp_path / "app"
    app_dir.mkdir()
    (app_dir / "run").write_text("#!/bin/sh\n", encoding="utf-8")

    container = (
        ContainerfileContainer(image="quay.io/fedora/fedora:40")
        .with_directory("/opt/app", app_dir)
        .with_new_file("/etc/yum.repos.d/a.repo", "[a]\n", owner="root:root")
        .with_exec(["dnf", "-y", "install", "vim"])
        .with_label("org.example.role", "workstation")
    )

    assert render_containerfile(container) == (
        "FROM quay.io/fedora/fedora:40\n"
        "COPY context/000-app /opt/app\n"
        "COPY --chown=root:root --chmod=0644 context/001-a.repo /etc/yum.repos.d/a.repo\n"
        'RUN ["dnf", "-y", "install", "vim"]\n'
        'LABEL "org.example.role"="workstation"\n'
    )


def test_mounted_files_attach_to_later_commands(tmp_path: Path) -> None:
    secret = tmp_path / "token"
    secret.write_text("s3cret\n", encoding="utf-8")

    container = (
        ContainerfileContainer(image="base")
        .with_exec(["true"])
        .with_mounted_file("/run/token", secret)
        .with_exec(["cat", "/run/token"])
    )

    lines = render_containerfile(container).splitlines()
    assert lines[1] == 'RUN ["true"]'
    assert lines[2] == (
        "RUN --mount=type=bind,source=context/000-token,target=/run/token,readonly "
        '["cat", "/run/token"]'
    )


def test_label_lookup_prefers_new_labels_over_base() -> None:
    container = ContainerfileContainer(image="base", base_labels={"ostree.bootable": "true"})

    assert container.label("ostree.bootable") == "true"
    assert container.label("missing") == ""
    assert container.with_label("ostree.bootable", "false").label("ostree.bootable") == "false"
    assert container.label("ostree.bootable") == "true"


def test_missing_sources_fail_immediately(tmp_path: Path) -> None:
    container = ContainerfileContainer(image="base")

    with pytest.raises(ExecutionError):
        container.with_file("/etc/x", tmp_path / "missing")
    with pytest.raises(ExecutionError):
        container.with_directory("/opt/x", tmp_path / "missing")


def test_emit_writes_containerfile_and_context(tmp_path: Path) -> None:
    config = tmp_path / "app.conf"
    config.write_text("key=value\n", encoding="utf-8")
    container = (
        ContainerfileContainer(image="base")
        .with_file("/etc/app.conf", config)
        .with_new_file("/etc/yum.repos.d/a.repo", "[a]\n")
    )

    emission = emit_containerfile(container, tmp_path / "out")

    assert emission.containerfile.read_text(encoding="utf-8").startswith("FROM base\n")
    assert (emission.context_dir / "000-app.conf").read_text(encoding="utf-8") == "key=value\n"
    assert (emission.context_dir / "001-a.repo").read_text(encoding="utf-8") == "[a]\n"


def test_emit_refuses_existing_context_without_force(tmp_path: Path) -> None:
    container = ContainerfileContainer(image="base").with_new_file("/etc/a", "one\n")
    emit_containerfile(container, tmp_path)

    with pytest.raises(ValidationError):
        emit_containerfile(container, tmp_path)

    changed = ContainerfileContainer(image="base").with_new_file("/etc/b", "two\n")
    emission = emit_containerfile(changed, tmp_path, force=True)
    assert sorted(p.name for p in emission.context_dir.iterdir()) == ["000-b"]


def test_pipeline_output_renders_in_stage_order(tmp_path: Path) -> None:
    script = tmp_path / "setup.sh"
    script.write_text("#!/bin/sh\n", encoding="utf-8")
    runtime = _StaticRuntime({"version": "40"})
    image = Image(runtime=runtime, tag="40", date="20241031", fetcher=lambda url: b"[x]\n")
    image.repos("https://example.com/x.repo").script_post(script).install("vim").label("a", "1")

    result = image.build()

    assert isinstance(result, ContainerfileContainer)
    assert render_containerfile(result).splitlines() == [
        "FROM quay.io/fedora/fedora:40",
        "COPY --chown=root:root --chmod=0644 context/000-x.repo /etc/yum.repos.d/x.repo",
        'RUN ["dnf", "-y", "upgrade"]',
        'RUN ["dnf", "-y", "install", "vim"]',
        'RUN ["dnf", "clean", "all"]',
        'RUN ["rm", "-f", "/etc/yum.repos.d/x.repo"]',
        "COPY context/001-setup.sh /tmp/setup.sh",
        'RUN ["/tmp/setup.sh"]',
        'RUN ["rm", "-f", "/tmp/setup.sh"]',
        'LABEL "a"="1"',
    ]


def test_podman_runtime_reads_base_labels(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _patch_podman(monkeypatch, labels={"ostree.bootable": "true"})

    container = PodmanRuntime().from_image("quay.io/fedora/fedora:40")

    assert container.label("ostree.bootable") == "true"
    assert calls[0] == ["podman", "pull", "--quiet", "quay.io/fedora/fedora:40"]
    assert calls[1][:3] == ["podman", "image", "inspect"]


def test_podman_runtime_without_pull_handles_null_labels(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls = _patch_podman(monkeypatch, labels=None)

    container = PodmanRuntime(pull=False).from_image("localhost/base:1")

    assert container.base_labels == {}
    assert [cmd[1] for cmd in calls] == ["image"]


def test_podman_build_returns_image_id(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _patch_podman(monkeypatch, labels={})
    container = ContainerfileContainer(image="base").with_exec(["true"])

    image_id = PodmanRuntime(build_args=["--layers"]).build(
        container,
        tags=["localhost/custom:40", "localhost/custom:latest"],
        build_dir=tmp_path,
    )

    assert image_id == "sha256:abc123"
    build = calls[-1]
    assert build[:2] == ["podman", "build"]
    assert build.count("--tag") == 2
    assert build[-2:] == ["--layers", str(tmp_path)]
    assert (tmp_path / "Containerfile").exists()


def test_podman_build_rejects_in_process_state(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _patch_podman(monkeypatch, labels={})

    with pytest.raises(ExecutionError) as excinfo:
        PodmanRuntime().build(InProcessContainer(image="base"))

    assert excinfo.value.context["type"] == "InProcessContainer"
    assert calls == []


def test_podman_failure_raises_execution_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("fedimg.containers.podman.shutil.which", lambda _: "/usr/bin/podman")

    class FakeResult:
        returncode = 125
        stdout = ""
        stderr = "Error: manifest unknown"

    monkeypatch.setattr(
        "fedimg.containers.podman.subprocess.run",
        lambda *a, **kw: FakeResult(),
    )

    with pytest.raises(ExecutionError) as excinfo:
        PodmanRuntime().from_image("quay.io/fedora/missing:1")

    assert excinfo.value.context["operation"] == "pull"
    assert excinfo.value.context["returncode"] == "125"
    assert "manifest unknown" in excinfo.value.context["stderr"]


def test_podman_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("fedimg.containers.podman.shutil.which", lambda _: None)

    with pytest.raises(ExecutionError, match="requires `podman`"):
        PodmanRuntime().from_image("quay.io/fedora/fedora:40")


class _StaticRuntime:
    name = "static"

    def __init__(self, labels: dict[str, str]) -> None:
        self.labels = labels

    def from_image(self, image: str) -> ContainerfileContainer:
        return ContainerfileContainer(image=image, base_labels=self.labels)


def _patch_podman(
    monkeypatch: pytest.MonkeyPatch,
    *,
    labels: dict[str, str] | None,
) -> list[list[str]]:
    calls: list[list[str]] = []

    class FakeResult:
        def __init__(self, stdout: str = "") -> None:
            self.returncode = 0
            self.stdout = stdout
            self.stderr = ""

    def fake_run(cmd: list[str], **kwargs: Any) -> FakeResult:
        calls.append(list(cmd))
        if cmd[1] == "image":
            return FakeResult(json.dumps(labels))
        if cmd[1] == "build":
            iidfile = Path(cmd[cmd.index("--iidfile") + 1])
            iidfile.write_text("sha256:abc123\n", encoding="utf-8")
        return FakeResult()

    monkeypatch.setattr("fedimg.containers.podman.shutil.which", lambda _: "/usr/bin/podman")
    monkeypatch.setattr("fedimg.containers.podman.subprocess.run", fake_run)
    return calls
