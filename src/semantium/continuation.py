"""Resolution of continuation targets into the words reachable next."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

from semantium.catalog import Catalog, WordDescriptor
from semantium.exceptions import AmbiguousGrammar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstructionStep:
    word: WordDescriptor


@dataclass(frozen=True)
class ResultStep:
    name: str


@dataclass(frozen=True)
class InvalidStep:
    name: str


Step = Union[InstructionStep, ResultStep, InvalidStep]


@dataclass(frozen=True)
class ContinuationSet:
    block_types: tuple[type, ...]
    word_index: Mapping[str, WordDescriptor]
    allows_result_access: bool

    def resolve(self, name: str) -> Step:
        word = self.word_index.get(name)
        if word is not None:
            return InstructionStep(word)
        if self.allows_result_access:
            return ResultStep(name)
        return InvalidStep(name)

    def word_names(self) -> tuple[str, ...]:
        return tuple(self.word_index)


def build_continuation_set(catalog: Catalog, targets: tuple[type, ...]) -> ContinuationSet:
    """Merge the words of every block in ``targets``.

    ``targets`` must already be resolved against the catalog. A word name
    defined by two of the blocks is an authoring error.
    """
    blocks: list[type] = []
    for target in targets:
        if target is catalog.result or target in blocks:
            continue
        blocks.append(target)

    owners: dict[str, list[type]] = {}
    word_index: dict[str, WordDescriptor] = {}
    for block in blocks:
        for name, word in catalog.by_block[block].items():
            owners.setdefault(name, []).append(block)
            word_index.setdefault(name, word)
    for name, defining in owners.items():
        if len(defining) > 1:
            raise AmbiguousGrammar(name, tuple(defining))

    return ContinuationSet(
        block_types=tuple(blocks),
        word_index=MappingProxyType(word_index),
        allows_result_access=catalog.result in targets,
    )


class ContinuationResolver:
    """Normalises raw continuation values and memoises resolved sets."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self._cache: dict[tuple[type, ...], ContinuationSet] = {}

    def resolve(self, value: object, *, word: WordDescriptor | None = None) -> ContinuationSet:
        targets = self.catalog.normalize_targets(
            value,
            block=word.block if word is not None else None,
            word=word.name if word is not None else "",
        )
        cached = self._cache.get(targets)
        if cached is not None:
            return cached
        continuation = build_continuation_set(self.catalog, targets)
        self._cache[targets] = continuation
        logger.debug(
            "resolved continuation %s (result access: %s)",
            [block.__name__ for block in continuation.block_types],
            continuation.allows_result_access,
        )
        return continuation
