"""Command line entrypoint.

Usage:
    fedimg tags recipe.json [--latest]
    fedimg emit recipe.json OUTPUT_DIR [--force]
    fedimg build recipe.json --tag NAME [--tag NAME ...] [--latest]
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence

from fedimg.compiler import emit_containerfile
from fedimg.containers import ContainerfileContainer, PodmanRuntime
from fedimg.errors import ExecutionError, FedimgError
from fedimg.image import Image
from fedimg.recipe import load_recipe


def cmd_tags(args: argparse.Namespace) -> int:
    image = _load(args)
    for tag in image.default_tags(latest=args.latest):
        print(tag)
    return 0


def cmd_emit(args: argparse.Namespace) -> int:
    image = _load(args)
    container = _containerfile(image.build())
    emission = emit_containerfile(container, args.output_dir, force=args.force)
    print(emission.containerfile)
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    runtime = _runtime(args)
    image = _load(args, runtime=runtime)
    tags = list(args.tag)
    if args.default_tags:
        repository = args.repository or image.variant
        tags.extend(f"{repository}:{tag}" for tag in image.default_tags(latest=args.latest))
    image_id = runtime.build(_containerfile(image.build()), tags=tags)
    print(image_id)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fedimg", description="Fedora-based image builder")
    parser.add_argument("--podman", default="podman", help="podman binary to invoke")
    parser.add_argument("--no-pull", action="store_true", help="Skip pulling the base image")
    parser.add_argument("--date", help="Override the YYYYMMDD build date")
    sub = parser.add_subparsers(dest="command", required=True)

    tags_p = sub.add_parser("tags", help="Print the default tags for a recipe")
    tags_p.add_argument("recipe")
    tags_p.add_argument("--latest", action="store_true", help="Append the latest tag")
    tags_p.set_defaults(handler=cmd_tags)

    emit_p = sub.add_parser("emit", help="Write a Containerfile and build context")
    emit_p.add_argument("recipe")
    emit_p.add_argument("output_dir")
    emit_p.add_argument("--force", action="store_true", help="Replace an existing context")
    emit_p.set_defaults(handler=cmd_emit)

    build_p = sub.add_parser("build", help="Run the pipeline and podman build")
    build_p.add_argument("recipe")
    build_p.add_argument("--tag", action="append", default=[], help="Image tag (repeatable)")
    build_p.add_argument(
        "--default-tags", action="store_true", help="Also tag with the default tag set"
    )
    build_p.add_argument("--repository", help="Repository name for default tags")
    build_p.add_argument("--latest", action="store_true", help="Include latest in default tags")
    build_p.set_defaults(handler=cmd_build)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except FedimgError as exc:
        print(json.dumps(exc.to_dict(), indent=2, sort_keys=True), file=sys.stderr)
        return 1


def _runtime(args: argparse.Namespace) -> PodmanRuntime:
    return PodmanRuntime(binary=args.podman, pull=not args.no_pull)


def _load(args: argparse.Namespace, *, runtime: PodmanRuntime | None = None) -> Image:
    kwargs: dict[str, object] = {"runtime": runtime or _runtime(args)}
    if args.date:
        kwargs["date"] = args.date
    return load_recipe(args.recipe, **kwargs)


def _containerfile(container: object) -> ContainerfileContainer:
    if not isinstance(container, ContainerfileContainer):
        raise ExecutionError(
            "Pipeline result is not a Containerfile state.",
            context={"operation": "emit", "type": type(container).__name__},
        )
    return container


if __name__ == "__main__":
    raise SystemExit(main())
