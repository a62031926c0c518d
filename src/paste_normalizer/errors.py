# -*- coding: utf-8 -*-
"""
Exception hierarchy for the normalization pipeline.
"""


class NormalizerError(Exception):
    """Base class for pipeline errors."""


class ParserUnavailableError(NormalizerError):
    """The markup parsing backend is not installed."""


class UnknownModeError(NormalizerError, ValueError):
    """Requested mode profile does not exist."""

    def __init__(self, mode: str):
        super().__init__(f"Unknown mode: {mode!r}")
        self.mode = mode


class UnknownTransformError(NormalizerError, ValueError):
    """Override map names a transform that does not exist."""

    def __init__(self, name: str):
        super().__init__(f"Unknown transform: {name!r}")
        self.name = name
