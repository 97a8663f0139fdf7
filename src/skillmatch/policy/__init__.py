"""Matching policy — parameters loaded from config/matching_policy.json."""

from skillmatch.policy.resolver import PolicyResolver

__all__ = ["PolicyResolver"]
