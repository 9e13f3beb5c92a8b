"""
Character Registry

The character visual dictionary: named descriptions that are re-injected into
every image prompt so a character looks the same in panels generated at
different times. Names are matched as plain substrings, so two characters whose
names overlap ("Ann" / "Anna") both match; keeping names distinct is up to the
caller.
"""

from typing import Iterable, Iterator, List, Optional, Tuple

from storyforge.core.logging_config import get_logger
from storyforge.storyboard.models import CharacterProfile

logger = get_logger("storyboard.characters")


class CharacterRegistry:
    """Mutable ordered list of character profiles."""

    def __init__(self, characters: Iterable[CharacterProfile] = ()):
        self._characters: List[CharacterProfile] = list(characters)

    @property
    def characters(self) -> Tuple[CharacterProfile, ...]:
        """Snapshot of the profiles, safe to hand to the prompt composer."""
        return tuple(CharacterProfile(c.name, c.description) for c in self._characters)

    def replace_all(self, characters: Iterable[CharacterProfile]) -> None:
        self._characters = list(characters)
        logger.info(f"Character registry loaded with {len(self._characters)} profile(s)")

    def add(self, profile: CharacterProfile) -> int:
        self._characters.append(profile)
        return len(self._characters) - 1

    def get(self, index: int) -> CharacterProfile:
        return self._characters[index]

    def update_description(self, index: int, description: str) -> None:
        """Replace the description at ``index``.

        Raises:
            IndexError: if ``index`` is out of range
        """
        if not 0 <= index < len(self._characters):
            raise IndexError(f"No character at index {index}")
        profile = self._characters[index]
        profile.description = description
        logger.debug(f"Updated description for {profile.name}")

    def find_by_name(self, name: str) -> Optional[CharacterProfile]:
        for profile in self._characters:
            if profile.name == name:
                return profile
        return None

    def mentioned_in(self, text: str) -> List[CharacterProfile]:
        """Profiles whose name occurs in ``text``, in registry order."""
        if not text:
            return []
        return [c for c in self._characters if c.name and c.name in text]

    def to_list(self) -> List[dict]:
        return [c.to_dict() for c in self._characters]

    def __len__(self) -> int:
        return len(self._characters)

    def __iter__(self) -> Iterator[CharacterProfile]:
        return iter(self.characters)
