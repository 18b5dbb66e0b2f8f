"""Mutable Fedora base with third-party repos and a post-install script."""

from pathlib import Path

from fedimg import Image, PodmanRuntime

HERE = Path(__file__).parent / "workstation"


def build_server_image() -> None:
    podman = PodmanRuntime()
    img = Image(variant="fedora", tag="40", runtime=podman)
    img.repos("https://pkgs.tailscale.com/stable/fedora/tailscale.repo", keep=True)
    img.install_groups("development-tools")
    img.install("tailscale", "vim-enhanced", "htop")
    img.remove("nano-default-editor")
    img.swap("ffmpeg-free", "ffmpeg")
    img.file("/etc/motd", HERE / "files" / "motd")
    img.script_post(HERE / "scripts" / "enable-services.sh")
    img.description("Fedora server with tailscale")

    result = img.build()
    podman.build(result, tags=[f"localhost/fedora-server:{t}" for t in img.default_tags()])


if __name__ == "__main__":
    build_server_image()
