"""Skill taxonomy — loads, validates, queries and updates skill relationships.

The taxonomy is a flat map: canonical skill → SkillRelationship.
Keys are normalized names; alternative names resolve to the same entry.
Relationships are one-hop adjacency lists and are never expanded
transitively.

Every mutation notifies registered listeners. The match calculator
registers its result cache so cached related-match scores are dropped
as soon as the relationships they were computed from change.

Usage:
    taxonomy = SkillTaxonomy.from_config_dir(Path("config"))
    rel = taxonomy.lookup("TS")          # the TypeScript entry
    taxonomy.update("Rust", SkillRelationship(related=["C++"]))
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from skillmatch.models.skill import SkillRelationship
from skillmatch.skills.normalizer import normalize_skill_name

logger = logging.getLogger(__name__)


class SkillTaxonomy:
    """In-memory skill relationship graph.

    Each instance is independent; nothing is shared between taxonomies.
    """

    TAXONOMY_FILENAME = "skill_taxonomy.json"

    def __init__(self, taxonomy_data: Optional[dict[str, Any]] = None) -> None:
        self._data = taxonomy_data if taxonomy_data is not None else {
            "version": "empty",
            "skills": {},
        }
        self._validate()
        self._entries: dict[str, SkillRelationship] = {}
        self._names: dict[str, str] = {}  # canonical key → display name
        self._aliases: dict[str, str] = {}  # normalized alternative name → canonical key
        self._listeners: list[Callable[[], None]] = []
        for name, rel_data in self._data["skills"].items():
            key = normalize_skill_name(name)
            self._entries[key] = SkillRelationship.from_dict(rel_data)
            self._names[key] = name
        self._rebuild_aliases()

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> SkillTaxonomy:
        """Load taxonomy from the canonical config directory.

        Args:
            config_dir: Path to the config directory containing
                skill_taxonomy.json.

        Raises:
            FileNotFoundError: If skill_taxonomy.json does not exist.
            ValueError: If the taxonomy is structurally invalid.
        """
        path = config_dir / cls.TAXONOMY_FILENAME
        if not path.exists():
            raise FileNotFoundError(f"Skill taxonomy not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillTaxonomy:
        """Build a taxonomy from an export() snapshot, without sharing its lists."""
        return cls(copy.deepcopy(data))

    def _validate(self) -> None:
        """Validate taxonomy structure.

        Raises:
            ValueError: If the taxonomy is structurally invalid.
        """
        if "version" not in self._data:
            raise ValueError("Skill taxonomy missing 'version' field")
        if "skills" not in self._data:
            raise ValueError("Skill taxonomy missing 'skills' field")
        skills = self._data["skills"]
        if not isinstance(skills, dict):
            raise ValueError("Skill taxonomy 'skills' must be a dict")

        seen: dict[str, str] = {}
        for name, rel_data in skills.items():
            if not isinstance(name, str) or not normalize_skill_name(name):
                raise ValueError(f"Invalid skill name: {name!r}")
            if not isinstance(rel_data, dict):
                raise ValueError(
                    f"Skill '{name}' must be a dict, "
                    f"got {type(rel_data).__name__}"
                )
            key = normalize_skill_name(name)
            if key in seen:
                raise ValueError(
                    f"Skills '{seen[key]}' and '{name}' normalize to the same key"
                )
            seen[key] = name
            # Field-level checks live in SkillRelationship.from_dict
            SkillRelationship.from_dict(rel_data)

    def _rebuild_aliases(self) -> None:
        aliases: dict[str, str] = {}
        for key, rel in self._entries.items():
            for alt in rel.alternative_names:
                alt_key = normalize_skill_name(alt)
                # Canonical keys always win over alternative names
                if alt_key and alt_key not in self._entries:
                    aliases.setdefault(alt_key, key)
        self._aliases = aliases

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def canonical_key(self, skill_name: str) -> str:
        """Resolve a name (or alternative name) to its canonical key.

        Unknown names return their normalized form.
        """
        key = normalize_skill_name(skill_name)
        if key in self._entries:
            return key
        return self._aliases.get(key, key)

    def contains(self, skill_name: str) -> bool:
        return self.canonical_key(skill_name) in self._entries

    def lookup(self, skill_name: str) -> Optional[SkillRelationship]:
        """Return a copy of the skill's relationships, or None if unknown."""
        rel = self._entries.get(self.canonical_key(skill_name))
        return rel.copy() if rel is not None else None

    def display_name(self, skill_name: str) -> str:
        """Return the taxonomy's spelling of a skill, or the input if unknown."""
        return self._names.get(self.canonical_key(skill_name), skill_name)

    def implies(self, holder: str, target: str) -> bool:
        """Check if holding `holder` covers `target` through an 'implies' edge."""
        rel = self._entries.get(self.canonical_key(holder))
        if rel is None:
            return False
        target_key = self.canonical_key(target)
        return any(self.canonical_key(s) == target_key for s in rel.implies)

    def related_skills(self, skill_name: str) -> list[str]:
        """Return the 'related' list of a skill (empty if unknown)."""
        rel = self._entries.get(self.canonical_key(skill_name))
        return list(rel.related) if rel is not None else []

    def all_skills(self) -> list[str]:
        """Return all display names, sorted case-insensitively."""
        return sorted(self._names.values(), key=str.lower)

    def skills_in_category(self, category: str) -> list[str]:
        wanted = category.lower()
        return sorted(
            (
                self._names[key]
                for key, rel in self._entries.items()
                if any(c.lower() == wanted for c in rel.categories)
            ),
            key=str.lower,
        )

    def skill_count(self) -> int:
        return len(self._entries)

    @property
    def version(self) -> str:
        return str(self._data.get("version", "unknown"))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked after every mutation."""
        self._listeners.append(callback)

    def update(self, skill_name: str, relationship: SkillRelationship) -> None:
        """Add or replace the relationships of a skill.

        An alternative name updates the entry it belongs to.
        """
        key = self.canonical_key(skill_name)
        if not key:
            raise ValueError(f"Invalid skill name: {skill_name!r}")
        self._entries[key] = relationship.copy()
        self._names.setdefault(key, skill_name)
        self._rebuild_aliases()
        logger.info("Taxonomy entry updated: %s", self._names[key])
        self._notify()

    def add_related(self, skill_name: str, related_name: str) -> bool:
        """Append `related_name` to a skill's 'related' list.

        Creates a bare entry if the skill is unknown. Idempotent.

        Returns:
            True if the taxonomy changed.
        """
        key = self.canonical_key(skill_name)
        related_key = self.canonical_key(related_name)
        if not key or not related_key or key == related_key:
            return False
        rel = self._entries.get(key)
        if rel is None:
            rel = SkillRelationship()
            self._entries[key] = rel
            self._names[key] = skill_name
        if any(self.canonical_key(r) == related_key for r in rel.related):
            return False
        rel.related.append(related_name)
        logger.info(
            "Taxonomy relation added: %s -> %s", self._names[key], related_name,
        )
        self._notify()
        return True

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self) -> dict[str, Any]:
        """Return the taxonomy in its JSON config shape."""
        return {
            "version": self.version,
            "skills": {
                self._names[key]: rel.to_dict()
                for key, rel in self._entries.items()
            },
        }
