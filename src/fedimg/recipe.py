"""Declarative JSON recipes that populate an ``Image`` builder."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from fedimg.errors import ValidationError
from fedimg.image import Image

RECIPE_KEYS = frozenset(
    {
        "base",
        "description",
        "directories",
        "exec",
        "files",
        "labels",
        "package_groups",
        "packages",
        "repos",
        "scripts",
    }
)
BASE_KEYS = frozenset({"registry", "org", "variant", "suffix", "tag"})


def read_recipe(path: str | Path) -> dict[str, Any]:
    recipe_path = Path(path)
    try:
        parsed = json.loads(recipe_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValidationError(
            "Recipe file does not exist.",
            context={"operation": "read_recipe", "path": str(recipe_path)},
        ) from exc
    except json.JSONDecodeError as exc:
        raise ValidationError(
            "Recipe is not valid JSON.",
            context={"operation": "read_recipe", "path": str(recipe_path), "error": str(exc)},
        ) from exc
    if not isinstance(parsed, dict):
        raise ValidationError(
            "Recipe must be a JSON object.",
            context={"operation": "read_recipe", "path": str(recipe_path)},
        )
    return parsed


def load_recipe(
    recipe: str | Path | Mapping[str, Any],
    *,
    base_dir: str | Path | None = None,
    **image_kwargs: Any,
) -> Image:
    """Build an ``Image`` from a recipe file or mapping.

    Relative source paths resolve against the recipe file's directory, or
    ``base_dir`` for mappings. ``image_kwargs`` are passed to ``Image``.
    """
    if isinstance(recipe, Mapping):
        data = dict(recipe)
        root = Path(base_dir) if base_dir is not None else Path.cwd()
    else:
        data = read_recipe(recipe)
        root = Path(base_dir) if base_dir is not None else Path(recipe).resolve().parent

    unknown = sorted(set(data) - RECIPE_KEYS)
    if unknown:
        raise ValidationError(
            "Recipe contains unknown keys.",
            hint="Allowed keys: " + ", ".join(sorted(RECIPE_KEYS)),
            context={"operation": "load_recipe", "keys": ",".join(unknown)},
        )

    base = _mapping(data.get("base", {}), "base")
    unknown_base = sorted(set(base) - BASE_KEYS)
    if unknown_base:
        raise ValidationError(
            "Recipe base contains unknown keys.",
            context={"operation": "load_recipe", "keys": ",".join(unknown_base)},
        )
    image = Image(**{**base, **image_kwargs})

    for entry in _list(data.get("directories", []), "directories"):
        entry = _mapping(entry, "directories[]")
        image.directory(_str(entry.get("destination"), "destination"), root / _source(entry))
    for entry in _list(data.get("files", []), "files"):
        entry = _mapping(entry, "files[]")
        image.file(_str(entry.get("destination"), "destination"), root / _source(entry))
    for entry in _list(data.get("repos", []), "repos"):
        entry = _mapping(entry, "repos[]")
        urls = [_str(url, "repos[].urls[]") for url in _list(entry.get("urls", []), "urls")]
        image.repos(*urls, keep=_bool(entry.get("keep", False), "repos[].keep"))

    groups = _mapping(data.get("package_groups", {}), "package_groups")
    image.install_groups(*_strings(groups.get("install", []), "package_groups.install"))
    image.remove_groups(*_strings(groups.get("remove", []), "package_groups.remove"))

    packages = _mapping(data.get("packages", {}), "packages")
    if "install" in packages:
        image.install(*_strings(packages["install"], "packages.install"))
    if "remove" in packages:
        image.remove(*_strings(packages["remove"], "packages.remove"))
    for entry in _list(packages.get("swap", []), "packages.swap"):
        entry = _mapping(entry, "packages.swap[]")
        image.swap(_str(entry.get("remove"), "remove"), _str(entry.get("install"), "install"))

    scripts = _mapping(data.get("scripts", {}), "scripts")
    for path in _strings(scripts.get("pre", []), "scripts.pre"):
        image.script_pre(root / path)
    for path in _strings(scripts.get("post", []), "scripts.post"):
        image.script_post(root / path)

    commands = _mapping(data.get("exec", {}), "exec")
    for argv in _list(commands.get("pre", []), "exec.pre"):
        image.exec_pre(*_strings(argv, "exec.pre[]"))
    for argv in _list(commands.get("post", []), "exec.post"):
        image.exec_post(*_strings(argv, "exec.post[]"))

    for name, value in _mapping(data.get("labels", {}), "labels").items():
        image.label(name, _str(value, f"labels.{name}"))
    if "description" in data:
        image.description(_str(data["description"], "description"))
    return image


def _source(entry: Mapping[str, Any]) -> str:
    return _str(entry.get("source"), "source")


def _mapping(value: object, key: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(
            "Recipe value must be an object.",
            context={"operation": "load_recipe", "key": key},
        )
    return dict(value)


def _list(value: object, key: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValidationError(
            "Recipe value must be a list.",
            context={"operation": "load_recipe", "key": key},
        )
    return value


def _str(value: object, key: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(
            "Recipe value must be a string.",
            context={"operation": "load_recipe", "key": key},
        )
    return value


def _bool(value: object, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(
            "Recipe value must be true or false.",
            context={"operation": "load_recipe", "key": key},
        )
    return value


def _strings(value: object, key: str) -> list[str]:
    return [_str(item, key) for item in _list(value, key)]
