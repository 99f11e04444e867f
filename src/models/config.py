"""Configuration models for screenshot capture: viewports and pages."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError


class ConfigError(Exception):
    """Raised when a viewports or urls file exists but cannot be used."""


class ViewportSpec(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class PageSpec(BaseModel):
    path: str
    name: str  # stable identifier, used in screenshot filenames


DEFAULT_VIEWPORTS: dict[str, dict[str, int]] = {
    "mobile": {"width": 375, "height": 812},
    "tablet": {"width": 768, "height": 1024},
    "desktop": {"width": 1024, "height": 768},
    "wide": {"width": 1440, "height": 900},
    "ultrawide": {"width": 1920, "height": 1080},
}

DEFAULT_PAGES: list[dict[str, str]] = [
    {"path": "/", "name": "home"},
    {"path": "/over-mij/", "name": "over-mij"},
    {"path": "/behandeling/", "name": "behandeling"},
    {"path": "/aanmelding/", "name": "aanmelding"},
    {"path": "/tarieven-en-vergoeding/", "name": "tarieven"},
    {"path": "/cursussen/", "name": "cursussen"},
    {"path": "/werkwijze/", "name": "werkwijze"},
    {"path": "/werk/", "name": "werk"},
    {"path": "/sport/", "name": "sport"},
    {"path": "/gezondheid/", "name": "gezondheid"},
    {"path": "/running-therapie/", "name": "running-therapie"},
    {"path": "/contact/", "name": "contact"},
    {"path": "/privacy/", "name": "privacy"},
    {"path": "/disclaimer/", "name": "disclaimer"},
]


def _read_json(path: Path):
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def load_viewports(path: str | Path | None = None) -> dict[str, ViewportSpec]:
    """Load the viewport mapping from a JSON file, or the built-in defaults."""
    data = DEFAULT_VIEWPORTS
    if path is not None and Path(path).exists():
        data = _read_json(Path(path))
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain an object of name -> {{width, height}}")
    try:
        return {name: ViewportSpec(**spec) for name, spec in data.items()}
    except (TypeError, ValidationError) as e:
        raise ConfigError(f"Invalid viewport definition in {path}: {e}") from e


def load_pages(path: str | Path | None = None) -> list[PageSpec]:
    """Load the page list from a JSON file, or the built-in defaults."""
    data = DEFAULT_PAGES
    if path is not None and Path(path).exists():
        data = _read_json(Path(path))
        if not isinstance(data, list):
            raise ConfigError(f"{path} must contain a list of {{path, name}} objects")
    try:
        return [PageSpec(**entry) for entry in data]
    except (TypeError, ValidationError) as e:
        raise ConfigError(f"Invalid page definition in {path}: {e}") from e
