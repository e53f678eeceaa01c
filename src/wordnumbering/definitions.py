"""Definition store - abstract numbering definitions and concrete instances."""

from __future__ import annotations

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from wordnumbering.errors import MalformedDefinition, UnresolvedNumberingReference
from wordnumbering.ir import (
    MAX_LEVELS,
    AbstractNumberingDefinition,
    ConcreteNumberingInstance,
    LevelDefinition,
)

logger = logging.getLogger(__name__)


class DefinitionStore:
    """Read-only lookup over a document's numbering definitions.

    Built once per document with :meth:`load`; every lookup applies the
    instance's level overrides.
    """

    def __init__(
        self,
        abstracts: Dict[str, AbstractNumberingDefinition],
        instances: Dict[str, ConcreteNumberingInstance],
    ) -> None:
        self._abstracts = MappingProxyType(dict(abstracts))
        self._instances = MappingProxyType(dict(instances))

    @classmethod
    def empty(cls) -> "DefinitionStore":
        return cls({}, {})

    @classmethod
    def load(
        cls,
        abstracts: Iterable[AbstractNumberingDefinition],
        instances: Iterable[ConcreteNumberingInstance],
        *,
        style_numbering: Optional[Mapping[str, str]] = None,
    ) -> "DefinitionStore":
        """Validate and index parsed definitions.

        Args:
            abstracts: Parsed w:abstractNum definitions.
            instances: Parsed w:num instances.
            style_numbering: styleId -> numId for numbering styles, used to
                follow w:numStyleLink.

        Raises:
            MalformedDefinition: an instance references an unknown abstract
                definition, an override targets a level outside 0..8, or a
                numStyleLink cannot be followed.
        """
        abstract_map = {a.abstract_id: a for a in abstracts}
        instance_map: Dict[str, ConcreteNumberingInstance] = {}

        for instance in instances:
            if instance.abstract_id not in abstract_map:
                raise MalformedDefinition(
                    f"numbering instance {instance.num_id} references unknown abstract definition {instance.abstract_id}"
                )
            for index in instance.overrides:
                if not 0 <= index < MAX_LEVELS:
                    raise MalformedDefinition(
                        f"numbering instance {instance.num_id} overrides level {index} outside 0..{MAX_LEVELS - 1}"
                    )
            instance_map[instance.num_id] = instance

        linked = {
            abstract_id: _follow_style_link(abstract_id, abstract_map, instance_map, style_numbering or {})
            for abstract_id, abstract in abstract_map.items()
            if abstract.num_style_link and not abstract.levels
        }
        for abstract_id, levels in linked.items():
            abstract_map[abstract_id] = replace(abstract_map[abstract_id], levels=levels)

        logger.debug(f"Loaded {len(abstract_map)} abstract definitions, {len(instance_map)} instances")
        return cls(abstract_map, instance_map)

    # ------------------------------------------------------------------
    def __contains__(self, num_id: object) -> bool:
        return num_id in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    @property
    def abstracts(self) -> Mapping[str, AbstractNumberingDefinition]:
        return self._abstracts

    @property
    def instances(self) -> Mapping[str, ConcreteNumberingInstance]:
        return self._instances

    def instance(self, num_id: str) -> ConcreteNumberingInstance:
        try:
            return self._instances[num_id]
        except KeyError:
            raise UnresolvedNumberingReference(f"unknown numbering instance {num_id}") from None

    def abstract(self, abstract_id: str) -> AbstractNumberingDefinition:
        try:
            return self._abstracts[abstract_id]
        except KeyError:
            raise UnresolvedNumberingReference(f"unknown abstract definition {abstract_id}") from None

    def abstract_for(self, num_id: str) -> AbstractNumberingDefinition:
        return self.abstract(self.instance(num_id).abstract_id)

    def level_for(self, num_id: str, level: int) -> LevelDefinition:
        """Effective level definition for an instance.

        A complete-level override replaces the abstract level wholesale; a
        start override then replaces only the starting value. The result
        always carries the requested index.
        """
        instance = self.instance(num_id)
        abstract = self.abstract(instance.abstract_id)
        level_def = abstract.levels.get(level)

        override = instance.overrides.get(level)
        if override is not None:
            if override.level is not None:
                level_def = override.level
                if level_def.index != level:
                    level_def = replace(level_def, index=level)
            if override.start_override is not None and level_def is not None:
                level_def = replace(level_def, start=override.start_override)

        if level_def is None:
            raise UnresolvedNumberingReference(
                f"numbering instance {num_id} (abstract {abstract.abstract_id}) has no level {level}"
            )
        return level_def

    def levels_for(self, num_id: str) -> Dict[int, LevelDefinition]:
        """All effective levels of an instance, keyed by level index."""
        instance = self.instance(num_id)
        indexes = set(self.abstract(instance.abstract_id).levels) | set(instance.overrides)
        levels: Dict[int, LevelDefinition] = {}
        for index in sorted(indexes):
            try:
                levels[index] = self.level_for(num_id, index)
            except UnresolvedNumberingReference:
                # start override on a level the abstract definition lacks
                continue
        return levels


def _follow_style_link(
    abstract_id: str,
    abstracts: Mapping[str, AbstractNumberingDefinition],
    instances: Mapping[str, ConcreteNumberingInstance],
    style_numbering: Mapping[str, str],
) -> Mapping[int, LevelDefinition]:
    """Resolve the levels of an abstract definition that only links a list style."""
    seen = {abstract_id}
    current = abstracts[abstract_id]
    while current.num_style_link and not current.levels:
        style_id = current.num_style_link
        num_id = style_numbering.get(style_id)
        instance = instances.get(num_id) if num_id is not None else None
        if instance is None:
            raise MalformedDefinition(
                f"abstract definition {abstract_id} links numbering style {style_id} which has no numbering instance"
            )
        if instance.abstract_id in seen:
            raise MalformedDefinition(f"abstract definition {abstract_id} has a circular numStyleLink")
        seen.add(instance.abstract_id)
        current = abstracts[instance.abstract_id]
    return current.levels
