# -*- coding: utf-8 -*-
"""
Paste Normalizer - clean up pasted rich-text markup into mode-specific HTML.
"""
__version__ = "1.0.0"

from .modes import ModeProfile, Transform  # noqa: E402
from .pipeline import NormalizationPipeline, PipelineResult, run  # noqa: E402

__all__ = [
    "run",
    "NormalizationPipeline",
    "PipelineResult",
    "ModeProfile",
    "Transform",
    "__version__",
]
