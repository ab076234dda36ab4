from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path

from pycut.export import DEFAULT_ENCODER


@dataclass
class AppSettings:
    last_open_dir: str = ""
    last_save_dir: str = ""
    last_video_path: str = ""
    encoder_path: str = DEFAULT_ENCODER
    volume: int = 90
    log_file_enabled: bool = False
    window_width: int = 960
    window_height: int = 640


def get_settings_dir() -> Path:
    appdata = os.getenv("APPDATA")
    if appdata:
        base = Path(appdata)
    else:
        base = Path.home() / ".config"
    settings_dir = base / "pyCut"
    settings_dir.mkdir(parents=True, exist_ok=True)
    return settings_dir


def get_settings_path() -> Path:
    return get_settings_dir() / "settings.ini"


def load_settings() -> AppSettings:
    settings_path = get_settings_path()
    if not settings_path.exists():
        return AppSettings()
    parser = configparser.ConfigParser()
    try:
        parser.read(settings_path, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError):
        return AppSettings()
    return _from_parser(parser)


def save_settings(settings: AppSettings) -> None:
    parser = configparser.ConfigParser()
    parser["main"] = {
        "last_open_dir": settings.last_open_dir,
        "last_save_dir": settings.last_save_dir,
        "last_video_path": settings.last_video_path,
        "encoder_path": settings.encoder_path,
        "volume": str(settings.volume),
        "log_file_enabled": "1" if settings.log_file_enabled else "0",
        "window_width": str(settings.window_width),
        "window_height": str(settings.window_height),
    }
    with open(get_settings_path(), "w", encoding="utf-8") as fh:
        parser.write(fh)


def _from_parser(parser: configparser.ConfigParser) -> AppSettings:
    section = parser["main"] if parser.has_section("main") else {}
    encoder_path = str(section.get("encoder_path", DEFAULT_ENCODER)).strip() or DEFAULT_ENCODER
    return AppSettings(
        last_open_dir=str(section.get("last_open_dir", "")),
        last_save_dir=str(section.get("last_save_dir", "")),
        last_video_path=str(section.get("last_video_path", "")),
        encoder_path=encoder_path,
        volume=_clamp_int(_get_int(section, "volume", 90), 0, 100),
        log_file_enabled=_get_bool(section, "log_file_enabled", False),
        window_width=_clamp_int(_get_int(section, "window_width", 960), 640, 3840),
        window_height=_clamp_int(_get_int(section, "window_height", 640), 480, 2160),
    )


def _get_bool(section, key: str, default: bool) -> bool:
    raw = str(section.get(key, "1" if default else "0")).strip().lower()
    return raw in {"1", "true", "yes", "y", "on"}


def _get_int(section, key: str, default: int) -> int:
    try:
        return int(str(section.get(key, str(default))).strip())
    except ValueError:
        return default


def _clamp_int(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
