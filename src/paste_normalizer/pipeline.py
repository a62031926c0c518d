# -*- coding: utf-8 -*-
"""
Normalization pipeline for pasted rich-text markup.

Implements a chain of steps, each guarded so that a failing step keeps
the document produced by the previous one:
0. Plain-text conversion - wrap input lines in paragraphs (on request)
1. Parse - markup to tree (a failure returns the input unchanged)
2. Word cleanup - strip Office / Google Docs residue (optional)
3. Sanitize - allow-listed tags and attributes only
4. Clean - line breaks, list paragraphs, emphasis nesting
5. Mode transforms - selected by the mode profile, in fixed order
6. Format - indented, human-readable markup
"""
import html
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from .cleaner import clean
from .config import settings
from .formatter import format_tree
from .modes import ModeProfile, Transform
from .sanitizer import sanitize
from .transforms import apply_transforms
from .tree import Tree, merge_text_nodes, parse, serialize
from .word_cleanup import cleanup_word_markup

logger = logging.getLogger(__name__)

@dataclass
class PipelineResult:
    """Result of one normalization run."""

    html: str
    mode: str
    steps_applied: list[str] = field(default_factory=list)
    fallback: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


def convert_plain_text(text: str) -> str:
    """Turn each non-empty line into a paragraph and each empty line into a br."""
    lines = []
    for line in text.split("\n"):
        stripped = line.strip()
        lines.append(f"<p>{html.escape(stripped, quote=False)}</p>" if stripped else "<br>")
    return "\n".join(lines)


class NormalizationPipeline:
    """
    Normalization pipeline turning pasted markup into clean markup.

    Optional steps are toggled via configuration; mode transforms are
    selected per call by a ModeProfile.
    """

    def process(
            self,
            text: str,
            mode: str | None = None,
            overrides: Mapping[str | Transform, bool] | None = None,
            plain_text: bool = False,
    ) -> PipelineResult:
        """
        Normalize pasted markup.

        Args:
            text: Raw markup, or plain text when plain_text is set
            mode: Mode profile name; settings.DEFAULT_MODE when omitted
            overrides: Per-transform on/off values layered over the mode
            plain_text: Treat text as plain lines rather than markup

        Returns:
            PipelineResult with the formatted markup and applied steps

        Raises:
            UnknownModeError: mode is not a known profile
            UnknownTransformError: an override names no transform
        """
        profile = ModeProfile.resolve(mode or settings.DEFAULT_MODE, overrides)
        result = PipelineResult(html="", mode=profile.name)

        if not text or not text.strip():
            return result

        # Step 0: Plain-text conversion
        source = text
        if plain_text:
            source = convert_plain_text(text)
            result.steps_applied.append("plain_text")

        # Step 1: Parse (nothing downstream can run without a tree)
        try:
            tree = parse(source)
        except Exception as e:
            logger.warning(f"Parsing failed, returning input unchanged: {e}")
            result.html = text
            result.fallback = True
            return result
        result.steps_applied.append("parse")

        def run_stage(name: str, func: Callable[[Tree], Tree], current: Tree) -> Tree:
            return self._run_stage(result, name, func, current)

        # Step 2: Word cleanup
        if settings.ENABLE_WORD_CLEANUP:
            tree = run_stage(
                "word_cleanup",
                lambda t: cleanup_word_markup(t, include_images=settings.INCLUDE_IMAGES),
                tree,
            )

        # Step 3: Sanitize
        tree = run_stage("sanitize", lambda t: sanitize(t, clean_urls=settings.CLEAN_URLS), tree)

        # Step 4: Structural clean-up
        tree = run_stage("clean", clean, tree)

        # Step 5: Mode transforms
        tree = apply_transforms(tree, profile, run_stage=run_stage)

        # Step 6: Format
        result.html = self._step_format(result, tree, text)

        result.metadata = {
            "input_length": len(text),
            "output_length": len(result.html),
            "transforms": [transform.value for transform in profile.ordered],
        }
        logger.debug(
            f"Normalized {len(text)} chars in mode {profile.name}",
            extra={"steps": result.steps_applied},
        )
        return result

    @staticmethod
    def _run_stage(
            result: PipelineResult,
            name: str,
            func: Callable[[Tree], Tree],
            tree: Tree,
    ) -> Tree:
        """
        Run one stage on a copy of the tree.

        On failure the stage is skipped and the previous tree is returned
        untouched, so downstream stages still run.
        """
        working = tree.clone()
        try:
            transformed = func(working)
        except Exception as e:
            logger.warning(f"Stage {name} failed, keeping previous document: {e}", extra={"stage": name})
            return tree

        result.steps_applied.append(name)
        return transformed

    @staticmethod
    def _step_format(result: PipelineResult, tree: Tree, original: str) -> str:
        merge_text_nodes(tree)
        try:
            formatted = format_tree(tree)
        except Exception as e:
            logger.warning(f"Formatting failed, using raw serialization: {e}")
        else:
            result.steps_applied.append("format")
            return formatted

        try:
            return serialize(tree)
        except Exception as e:
            logger.warning(f"Serialization failed, returning input unchanged: {e}")
            result.fallback = True
            return original


def run(
        text: str,
        mode: str | None = None,
        overrides: Mapping[str | Transform, bool] | None = None,
        plain_text: bool = False,
) -> str:
    """Normalize text and return the formatted markup."""
    return normalization_pipeline.process(text, mode, overrides, plain_text).html


# Global pipeline instance
normalization_pipeline = NormalizationPipeline()
