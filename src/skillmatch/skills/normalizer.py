"""Skill name normalization.

Skill names arrive in many spellings ("Node.js", "nodejs", "NODE JS").
Normalization lowercases and drops everything except letters, digits,
'+' and '#', so "C++" and "C#" survive as distinct keys.

The normalizer additionally resolves taxonomy alternative names
("K8s" → "kubernetes") to the canonical taxonomy key.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skillmatch.skills.taxonomy import SkillTaxonomy

_STRIP = re.compile(r"[^a-z0-9+#]")


def normalize_skill_name(name: str) -> str:
    """Return the case- and punctuation-insensitive form of a skill name."""
    return _STRIP.sub("", name.lower())


class SkillNormalizer:
    """Canonicalizes skill names against a taxonomy.

    Usage:
        normalizer = SkillNormalizer(taxonomy)
        normalizer.canonicalize("K8s")  # "kubernetes"
    """

    def __init__(self, taxonomy: SkillTaxonomy) -> None:
        self._taxonomy = taxonomy

    def normalize(self, name: str) -> str:
        return normalize_skill_name(name)

    def canonicalize(self, name: str) -> str:
        """Map a name to its canonical taxonomy key.

        Names unknown to the taxonomy come back normalized.
        """
        return self._taxonomy.canonical_key(name)

    def same_skill(self, a: str, b: str) -> bool:
        return self.canonicalize(a) == self.canonicalize(b)
