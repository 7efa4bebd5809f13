from __future__ import annotations
import json
from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class Preset:
    version: int = 1
    tool: str = "photo-to-art"
    style: str = "default"
    intensity: int = 7
    prompt: str = ""
    quality: int = 95
    seed: Optional[int] = None
    concurrency: int = 4

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @staticmethod
    def from_json(s: str) -> "Preset":
        obj = json.loads(s)

        def get(key, default):
            # null in the file means "use the default"
            value = obj.get(key)
            return default if value is None else value

        seed = obj.get("seed")
        return Preset(
            version=int(get("version", 1)),
            tool=str(get("tool", "photo-to-art")),
            style=str(get("style", "default")),
            intensity=int(get("intensity", 7)),
            prompt=str(get("prompt", "")),
            quality=int(get("quality", 95)),
            seed=None if seed is None else int(seed),
            concurrency=int(get("concurrency", 4)),
        )


def load_preset(path: str) -> Preset:
    with open(path, "r", encoding="utf-8") as f:
        return Preset.from_json(f.read())


def save_preset(preset: Preset, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(preset.to_json())
