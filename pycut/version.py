from __future__ import annotations

from importlib import metadata

DIST_NAME = "pycut"
DEV_VERSION = "0.0.0 dev"


def get_display_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return DEV_VERSION


def get_app_title_base() -> str:
    return f"pyCut {get_display_version()}"
