"""Data models for Helm Steward."""

from __future__ import annotations

import enum


class DependencyUpdatePolicy(enum.Enum):
    """When the dependency manager runs before install/upgrade."""

    CHECK = "check"  # only when a declared dependency is missing or mismatched
    ALWAYS = "always"

    @classmethod
    def from_str(cls, s: str) -> DependencyUpdatePolicy:
        for member in cls:
            if member.value == s.strip().lower():
                return member
        return cls.CHECK
