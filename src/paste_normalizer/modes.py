# -*- coding: utf-8 -*-
"""
Mode profiles: which transforms run for a given output mode.

A profile is an immutable value resolved from a mode name plus optional
per-transform overrides. Transform order is fixed by the Transform enum.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from .errors import UnknownModeError, UnknownTransformError


class Transform(str, Enum):
    """Mode transforms, declared in execution order."""

    HEADING_STRONG = "heading_strong"
    KEY_TAKEAWAYS = "key_takeaways"
    STRAY_HEADING_REMOVAL = "stray_heading_removal"
    LINK_ATTRIBUTES = "link_attributes"
    HEADING_LIST_CONVERSION = "heading_list_conversion"
    SPACING = "spacing"
    LIST_COLON_NORMALIZATION = "list_colon_normalization"
    SOURCES_NORMALIZATION = "sources_normalization"
    RELATIVE_LINKS = "relative_links"


TRANSFORM_ORDER: tuple[Transform, ...] = tuple(Transform)

# Opt-in only: never enabled by a mode default
OPT_IN_TRANSFORMS = frozenset({Transform.RELATIVE_LINKS})

MODE_DEFAULTS: dict[str, frozenset[Transform]] = {
    "plain": frozenset({Transform.LIST_COLON_NORMALIZATION}),
    "editorial": frozenset(TRANSFORM_ORDER) - OPT_IN_TRANSFORMS,
    "commerce": frozenset({
        Transform.HEADING_STRONG,
        Transform.LINK_ATTRIBUTES,
        Transform.HEADING_LIST_CONVERSION,
        Transform.LIST_COLON_NORMALIZATION,
        Transform.SOURCES_NORMALIZATION,
    }),
    "custom": frozenset(TRANSFORM_ORDER) - OPT_IN_TRANSFORMS,
}

# Names used by earlier releases of the tool
MODE_ALIASES = {
    "regular": "plain",
    "blogs": "editorial",
    "shoppables": "commerce",
}

MODE_NAMES = tuple(MODE_DEFAULTS)


def canonical_mode(mode: str) -> str:
    name = (mode or "").strip().lower()
    name = MODE_ALIASES.get(name, name)
    if name not in MODE_DEFAULTS:
        raise UnknownModeError(mode)
    return name


def _as_transform(key) -> Transform:
    if isinstance(key, Transform):
        return key
    try:
        return Transform(str(key).strip().lower())
    except ValueError:
        raise UnknownTransformError(str(key)) from None


@dataclass(frozen=True)
class ModeProfile:
    """Immutable set of transforms enabled for one pipeline run."""

    name: str
    enabled: frozenset[Transform]

    @classmethod
    def resolve(
            cls,
            mode: str,
            overrides: Mapping[str | Transform, bool] | None = None,
    ) -> "ModeProfile":
        """
        Build a profile from a mode's defaults and explicit overrides.

        Args:
            mode: Mode name or legacy alias
            overrides: Per-transform on/off values; unset entries keep the default

        Raises:
            UnknownModeError: mode is not a known profile
            UnknownTransformError: an override names no transform
        """
        name = canonical_mode(mode)
        enabled = set(MODE_DEFAULTS[name])
        for key, value in (overrides or {}).items():
            transform = _as_transform(key)
            if value:
                enabled.add(transform)
            else:
                enabled.discard(transform)
        return cls(name=name, enabled=frozenset(enabled))

    def is_enabled(self, transform: Transform) -> bool:
        return transform in self.enabled

    @property
    def ordered(self) -> list[Transform]:
        """Enabled transforms in execution order."""
        return [transform for transform in TRANSFORM_ORDER if transform in self.enabled]
