"""Local player identity and preferences.

This is the only state kept on disk: the last name typed and the last
skin chosen, restored on the next launch.
"""

import json
import logging
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import List

from popcorn.errors import ValidationError

logger = logging.getLogger(__name__)

# Shared sprites that live next to the skins but are not skins
BACK_IMAGE_FILE = "bucket_back.png"
OBJECT_IMAGE_FILE = "Pochoclo.png"
RESERVED_ASSETS = {BACK_IMAGE_FILE.lower(), OBJECT_IMAGE_FILE.lower()}

_PNG_SUFFIX = re.compile(r"\.png$", re.IGNORECASE)


@dataclass
class PlayerProfile:
    """Display name and catcher skin of the local player."""
    name: str = ""
    skin: str = ""

    def validate(self) -> None:
        """Raise ValidationError unless a session may start."""
        if not self.name.strip():
            raise ValidationError("Enter your name to play")
        if not self.skin:
            raise ValidationError("Pick a skin to play")

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except ValidationError:
            return False
        return True

    def cleaned(self) -> "PlayerProfile":
        return PlayerProfile(name=self.name.strip(), skin=self.skin)

    @classmethod
    def load(cls, path: Path) -> "PlayerProfile":
        """Read a saved profile; a missing or broken file gives an empty one."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return cls()
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable profile {path}: {e}")
            return cls()

        if not isinstance(data, dict):
            return cls()
        return cls(
            name=str(data.get("name") or "").strip(),
            skin=str(data.get("skin") or ""),
        )

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(self), ensure_ascii=False), encoding="utf-8")
        logger.debug(f"Profile saved to {path}")


@dataclass(frozen=True)
class Skin:
    """A selectable catcher skin."""
    file: str

    @property
    def label(self) -> str:
        return skin_label(self.file)


def skin_label(file_name: str) -> str:
    """Display label for a skin file: the name without ``.png``."""
    return _PNG_SUFFIX.sub("", file_name)


def list_skins(skins_path: Path) -> List[Skin]:
    """Skins available in ``skins_path``, sorted by file name."""
    if not skins_path.is_dir():
        logger.warning(f"Skins directory not found: {skins_path}")
        return []

    return [
        Skin(file=item.name)
        for item in sorted(skins_path.iterdir(), key=lambda p: p.name.lower())
        if item.is_file()
        and item.suffix.lower() == ".png"
        and item.name.lower() not in RESERVED_ASSETS
    ]
