"""Sequence resolver - assign actual numbers to paragraphs in document order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from wordnumbering.definitions import DefinitionStore
from wordnumbering.errors import Diagnostic, UnresolvedNumberingReference
from wordnumbering.formatting import render
from wordnumbering.ir import (
    MAX_LEVELS,
    LevelDefinition,
    ParagraphNumberingContext,
    TrackerSnapshot,
)

logger = logging.getLogger(__name__)


class SequenceTracker:
    """Per-instance counters, one per level.

    Owned by a single resolution run; never shared between documents.
    """

    def __init__(self, num_id: str, abstract_id: str) -> None:
        self.num_id = num_id
        self.abstract_id = abstract_id
        self.counters: List[int] = [0] * MAX_LEVELS
        self.last_ordinal: Optional[int] = None

    def advance(
        self,
        level: int,
        ordinal: int,
        level_lookup: Callable[[int], Optional[LevelDefinition]],
    ) -> int:
        """Count one paragraph at ``level`` and return the level's new counter.

        Deeper levels are reset to zero unless their definition says they do
        not restart after ``level`` (w:lvlRestart).
        """
        self.counters[level] += 1
        for deeper in range(level + 1, MAX_LEVELS):
            deeper_def = level_lookup(deeper)
            if deeper_def is None or deeper_def.restarts_after(level):
                self.counters[deeper] = 0
        self.last_ordinal = ordinal
        return self.counters[level]

    def snapshot(self, levels: Mapping[int, LevelDefinition]) -> TrackerSnapshot:
        return TrackerSnapshot(
            num_id=self.num_id,
            abstract_id=self.abstract_id,
            counters=tuple(self.counters),
            levels=dict(levels),
        )


@dataclass
class ResolutionResult:
    """Contexts with numbering attached, plus per-paragraph diagnostics."""

    contexts: List[ParagraphNumberingContext] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def numbered(self) -> List[ParagraphNumberingContext]:
        return [ctx for ctx in self.contexts if ctx.resolved is not None]


class NumberingResolver:
    """Resolve paragraph numbering references against a DefinitionStore."""

    def __init__(self, store: DefinitionStore) -> None:
        self.store = store

    def resolve(self, contexts: Sequence[ParagraphNumberingContext]) -> ResolutionResult:
        """Resolve every context, strictly in ordinal order.

        Trackers are created fresh for each call, so resolving the same
        contexts twice gives identical results.
        """
        ordered = sorted(contexts, key=lambda ctx: ctx.ordinal)
        for previous, current in zip(ordered, ordered[1:]):
            if previous.ordinal == current.ordinal:
                raise ValueError(f"duplicate paragraph ordinal {current.ordinal}")

        trackers: Dict[str, SequenceTracker] = {}
        levels_cache: Dict[str, Dict[int, LevelDefinition]] = {}
        result = ResolutionResult()

        for ctx in ordered:
            if not ctx.is_numbered:
                result.contexts.append(ctx)
                continue

            try:
                level_def = self.store.level_for(ctx.num_id, ctx.level)
                abstract = self.store.abstract_for(ctx.num_id)
            except UnresolvedNumberingReference as exc:
                logger.warning(f"Paragraph {ctx.ordinal}: {exc}; leaving it unnumbered")
                result.diagnostics.append(Diagnostic.from_error(exc, ordinal=ctx.ordinal))
                result.contexts.append(ctx)
                continue

            if ctx.num_id not in levels_cache:
                levels_cache[ctx.num_id] = self.store.levels_for(ctx.num_id)
            levels = levels_cache[ctx.num_id]

            tracker = trackers.get(ctx.num_id)
            if tracker is None:
                tracker = trackers[ctx.num_id] = SequenceTracker(ctx.num_id, abstract.abstract_id)
            elif tracker.last_ordinal is not None:
                logger.debug(
                    f"Paragraph {ctx.ordinal}: numbering {ctx.num_id} continues from paragraph {tracker.last_ordinal}"
                )

            counter = tracker.advance(ctx.level, ctx.ordinal, levels.get)
            actual_number = level_def.start + counter - 1
            resolved = render(
                actual_number,
                level_def,
                tracker.snapshot(levels),
                diagnostics=result.diagnostics,
                ordinal=ctx.ordinal,
            )
            result.contexts.append(replace(ctx, resolved=resolved))

        logger.debug(f"Resolved {len(result.numbered)} numbered paragraphs with {len(trackers)} trackers")
        return result


def resolve_numbering(
    contexts: Sequence[ParagraphNumberingContext],
    store: DefinitionStore,
) -> ResolutionResult:
    """Convenience wrapper around :class:`NumberingResolver`."""
    return NumberingResolver(store).resolve(contexts)
