from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping

DEFAULT_STRINGS: Mapping[str, str] = {
    "AttachPhoto": "Photo",
    "AttachVideo": "Video",
    "AttachGif": "GIF",
    "AttachAudio": "Audio",
    "AttachRound": "Video message",
    "AttachSticker": "Sticker",
    "AttachDocument": "File",
    "AttachContact": "Contact",
    "AttachLocation": "Location",
    "AttachGame": "Game",
    "Call": "Call",
    "UnsupportedAttachment": "Unsupported attachment",
}


@dataclass(slots=True)
class Localizer:
    """Key to string lookup; unknown keys resolve to themselves."""

    strings: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_STRINGS))

    def __call__(self, key: str) -> str:
        return self.strings.get(key, key)

    @classmethod
    def from_file(cls, path: Path) -> "Localizer":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise ValueError(f"Cannot read locale file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"Locale file {path} must contain a JSON object")

        strings = dict(DEFAULT_STRINGS)
        strings.update({str(key): str(value) for key, value in data.items()})
        return cls(strings=strings)


def identity(key: str) -> str:
    return key
