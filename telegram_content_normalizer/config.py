from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dateutil.tz import gettz

from .localization import Localizer


@dataclass(slots=True)
class MapTileConfig:
    width: int = 300
    height: int = 100
    scale: int = 2
    zoom: int = 15


@dataclass(slots=True)
class AppConfig:
    map_tiles: MapTileConfig
    timezone: str
    locale_path: Optional[Path]
    localizer: Localizer = field(default_factory=Localizer)


def parse_map_tiles(
    width: int = 300,
    height: int = 100,
    scale: int = 2,
    zoom: int = 15,
) -> MapTileConfig:
    for name, value in (("width", width), ("height", height), ("scale", scale), ("zoom", zoom)):
        if value <= 0:
            raise ValueError(f"map tile {name} must be positive, got {value}")
    return MapTileConfig(width=width, height=height, scale=scale, zoom=zoom)


def validate_timezone(name: str) -> str:
    if gettz(name) is None:
        raise ValueError(f"Unknown timezone: {name}")
    return name


def build_app_config(
    *,
    timezone_name: str = "UTC",
    locale_path: Optional[Path] = None,
    map_width: int = 300,
    map_height: int = 100,
    map_scale: int = 2,
    map_zoom: int = 15,
) -> AppConfig:
    map_tiles = parse_map_tiles(map_width, map_height, map_scale, map_zoom)
    timezone = validate_timezone(timezone_name)
    localizer = Localizer.from_file(locale_path) if locale_path else Localizer()

    return AppConfig(
        map_tiles=map_tiles,
        timezone=timezone,
        locale_path=locale_path,
        localizer=localizer,
    )
