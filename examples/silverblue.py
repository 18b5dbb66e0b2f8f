"""Atomic desktop image; package changes go through rpm-ostree."""

from fedimg import Image
from fedimg.compiler import emit_containerfile


def emit_silverblue_image() -> None:
    img = Image(org="fedora-ostree-desktops", variant="silverblue", tag="40")
    img.remove("firefox", "firefox-langpacks")
    img.install("distrobox", "gnome-tweaks")
    img.exec_post("systemctl", "enable", "rpm-ostreed-automatic.timer")
    img.label("org.example.flavor", "silverblue-custom")

    emission = emit_containerfile(img.build(), "build/silverblue", force=True)
    print(emission.containerfile)
    print("\n".join(img.default_tags(latest=True)))


if __name__ == "__main__":
    emit_silverblue_image()
