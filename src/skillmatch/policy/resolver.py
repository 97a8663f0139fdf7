"""Policy resolver — loads the matching policy and answers parameter queries.

The policy lives in config/matching_policy.json. Every section is
optional; engines ask has_*_config() first and fall back to their own
defaults when a section is absent.

Usage:
    resolver = PolicyResolver.from_config_dir(Path("config"))
    if resolver.has_cache_config():
        ttl = resolver.cache_params()["ttl_seconds"]
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

_SECTIONS = (
    "match_options",
    "score_blend_weights",
    "workload_bands",
    "cache",
    "learning",
    "gap_thresholds",
)


class PolicyResolver:
    """Read-only view over the matching policy."""

    POLICY_FILENAME = "matching_policy.json"

    def __init__(self, policy_data: dict[str, Any]) -> None:
        self._data = policy_data
        self._validate()

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        """Load the policy from a config directory.

        Raises:
            FileNotFoundError: If matching_policy.json does not exist.
            ValueError: If the policy is structurally invalid.
        """
        path = config_dir / cls.POLICY_FILENAME
        if not path.exists():
            raise FileNotFoundError(f"Matching policy not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(data)

    @classmethod
    def defaults(cls) -> PolicyResolver:
        """A resolver with no sections; every engine uses its built-in defaults."""
        return cls({"version": "builtin"})

    def _validate(self) -> None:
        if not isinstance(self._data, dict):
            raise ValueError("Matching policy must be a JSON object")
        if "version" not in self._data:
            raise ValueError("Matching policy missing 'version' field")
        for section in _SECTIONS:
            if section not in self._data:
                continue
            expected = list if section == "workload_bands" else dict
            if not isinstance(self._data[section], expected):
                raise ValueError(
                    f"Policy section '{section}' must be a {expected.__name__}"
                )
        for band in self._data.get("workload_bands", []):
            if not isinstance(band, dict) or "below" not in band or "score" not in band:
                raise ValueError(
                    f"Workload band must have 'below' and 'score': {band!r}"
                )

    @property
    def version(self) -> str:
        return str(self._data.get("version", "unknown"))

    # ------------------------------------------------------------------
    # Section presence
    # ------------------------------------------------------------------

    def has_match_options_config(self) -> bool:
        return "match_options" in self._data

    def has_scoring_config(self) -> bool:
        return "score_blend_weights" in self._data or "workload_bands" in self._data

    def has_cache_config(self) -> bool:
        return "cache" in self._data

    def has_learning_config(self) -> bool:
        return "learning" in self._data

    def has_gap_config(self) -> bool:
        return "gap_thresholds" in self._data

    # ------------------------------------------------------------------
    # Section accessors (copies, so callers cannot edit the policy)
    # ------------------------------------------------------------------

    def match_option_defaults(self) -> dict[str, Any]:
        return dict(self._data.get("match_options", {}))

    def score_blend_weights(self) -> dict[str, float]:
        return dict(self._data.get("score_blend_weights", {}))

    def workload_bands(self) -> list[dict[str, float]]:
        """Utilization bands, ascending by 'below'."""
        bands = [dict(b) for b in self._data.get("workload_bands", [])]
        bands.sort(key=lambda b: b["below"])
        return bands

    def workload_floor_score(self) -> float:
        return float(self._data.get("workload_floor_score", 20))

    def cache_params(self) -> dict[str, Any]:
        return dict(self._data.get("cache", {}))

    def learning_params(self) -> dict[str, Any]:
        return dict(self._data.get("learning", {}))

    def gap_thresholds(self) -> dict[str, Any]:
        return dict(self._data.get("gap_thresholds", {}))
