"""Block registry and word catalog compiled once per grammar."""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

from semantium.blocks import (
    Hybrid,
    InstructionBlock,
    StaticWord,
    declared_members,
    is_block_type,
    is_initial_block_type,
)
from semantium.exceptions import (
    InvalidGrammarDefinition,
    UnknownContinuationBlock,
    UnsupportedWordDefinition,
)
from semantium.invariants import never

if TYPE_CHECKING:
    from semantium.chain import InstructionChain

logger = logging.getLogger(__name__)


class WordKind(str, Enum):
    STATIC = "static"
    PARAMETRIC = "parametric"
    HYBRID = "hybrid"


@dataclass(frozen=True, eq=False)
class WordDescriptor:
    """One catalog entry per (block, word name) pair."""

    block: type[InstructionBlock]
    name: str
    kind: WordKind
    instance: InstructionBlock = field(repr=False)
    definition: object = field(repr=False)

    @property
    def is_parametric(self) -> bool:
        return self.kind is WordKind.PARAMETRIC

    @property
    def is_callable(self) -> bool:
        return self.kind is not WordKind.STATIC

    @property
    def is_accessible(self) -> bool:
        return self.kind is not WordKind.PARAMETRIC

    @property
    def qualified_name(self) -> str:
        return f"{self.block.__name__}.{self.name}"

    @property
    def accessed_definition(self) -> object:
        if self.kind is WordKind.HYBRID:
            return self.definition.accessed  # type: ignore[attr-defined]
        return self.definition

    @property
    def literal_continuation(self) -> object | None:
        """The continuation when it is known without running user code."""
        if self.is_parametric:
            return None
        accessed = self.accessed_definition
        if _is_lazy(accessed):
            return None
        return accessed

    def access(self, chain: InstructionChain) -> object:
        if not self.is_accessible:
            never("parametric word accessed directly", word=self.qualified_name)
        accessed = self.accessed_definition
        if isinstance(accessed, StaticWord):
            return accessed.evaluate(self.instance, chain)
        if _is_lazy(accessed):
            return accessed(self.instance, chain)  # type: ignore[operator]
        return accessed

    def call(self, chain: InstructionChain, parameters: Sequence[object]) -> object:
        if self.is_parametric:
            func = self.definition
        elif self.kind is WordKind.HYBRID:
            func = self.definition.called  # type: ignore[attr-defined]
        else:
            never("static word called", word=self.qualified_name)
        return func(self.instance, chain, *parameters)  # type: ignore[operator]

    def evaluate(self, chain: InstructionChain, parameters: Sequence[object] | None) -> object:
        if parameters is None:
            return self.access(chain)
        return self.call(chain, parameters)


@dataclass(frozen=True)
class Catalog:
    """Block singletons plus the name -> descriptors catalog of one grammar."""

    blocks: tuple[type[InstructionBlock], ...]
    result: type
    instances: Mapping[type[InstructionBlock], InstructionBlock]
    initial_blocks: tuple[type[InstructionBlock], ...]
    words: Mapping[str, tuple[WordDescriptor, ...]]
    by_block: Mapping[type[InstructionBlock], Mapping[str, WordDescriptor]]
    target_names: Mapping[str, type]

    def descriptors(self) -> Iterable[WordDescriptor]:
        for block in self.blocks:
            yield from self.by_block[block].values()

    def instance_for(self, block: type[InstructionBlock]) -> InstructionBlock:
        return self.instances[block]

    def resolve_target(
        self,
        target: object,
        *,
        block: type | None = None,
        word: str = "",
    ) -> type:
        if isinstance(target, str):
            resolved = self.target_names.get(target)
            if resolved is None:
                raise UnknownContinuationBlock(target, block=block, word=word)
            return resolved
        if target is self.result or target in self.instances:
            return target  # type: ignore[return-value]
        raise UnknownContinuationBlock(target, block=block, word=word)

    def normalize_targets(
        self,
        value: object,
        *,
        block: type | None = None,
        word: str = "",
    ) -> tuple[type, ...]:
        items = value if isinstance(value, (tuple, list)) else (value,)
        return tuple(self.resolve_target(item, block=block, word=word) for item in items)


def classify_word(
    block: type[InstructionBlock],
    name: str,
    value: object,
    *,
    result: type,
) -> WordKind:
    if isinstance(value, Hybrid):
        if not value.complete or not callable(value.called):
            raise UnsupportedWordDefinition(block, name, value)
        return WordKind.HYBRID
    if isinstance(value, (StaticWord, tuple, list)):
        return WordKind.STATIC
    if isinstance(value, type):
        if is_block_type(value) or value is result:
            return WordKind.STATIC
        raise UnsupportedWordDefinition(block, name, value)
    if inspect.isfunction(value):
        return WordKind.PARAMETRIC
    raise UnsupportedWordDefinition(block, name, value)


def compile_catalog(blocks: Sequence[type[InstructionBlock]], result: type) -> Catalog:
    """Instantiate block singletons and classify every declared word."""
    instances: dict[type[InstructionBlock], InstructionBlock] = {}
    for block in blocks:
        if not is_block_type(block):
            raise InvalidGrammarDefinition(f"{block!r} is not an InstructionBlock subclass", block=block)
        if block in instances:
            raise InvalidGrammarDefinition(f"block {block.__name__} is declared twice", block=block)
        instances[block] = block()

    target_names = _target_names(tuple(instances), result)
    words: dict[str, list[WordDescriptor]] = defaultdict(list)
    by_block: dict[type[InstructionBlock], Mapping[str, WordDescriptor]] = {}
    for block, instance in instances.items():
        block_words: dict[str, WordDescriptor] = {}
        for name, value in declared_members(block).items():
            descriptor = WordDescriptor(
                block=block,
                name=name,
                kind=classify_word(block, name, value, result=result),
                instance=instance,
                definition=value,
            )
            block_words[name] = descriptor
            words[name].append(descriptor)
        by_block[block] = MappingProxyType(block_words)

    catalog = Catalog(
        blocks=tuple(instances),
        result=result,
        instances=MappingProxyType(instances),
        initial_blocks=tuple(block for block in instances if is_initial_block_type(block)),
        words=MappingProxyType({name: tuple(entries) for name, entries in words.items()}),
        by_block=MappingProxyType(by_block),
        target_names=MappingProxyType(target_names),
    )
    _check_literal_continuations(catalog)
    logger.debug(
        "compiled catalog: %d blocks, %d initial, %d word names",
        len(catalog.blocks),
        len(catalog.initial_blocks),
        len(catalog.words),
    )
    return catalog


def _target_names(blocks: tuple[type, ...], result: type) -> dict[str, type]:
    names: dict[str, type] = {}
    for target in (*blocks, result):
        name = target.__name__
        existing = names.get(name)
        if existing is not None and existing is not target:
            raise InvalidGrammarDefinition(
                f"two grammar targets share the name {name!r}; use the classes instead of names",
                name=name,
            )
        names[name] = target
    return names


def _check_literal_continuations(catalog: Catalog) -> None:
    for descriptor in catalog.descriptors():
        literal = descriptor.literal_continuation
        if literal is None:
            continue
        catalog.normalize_targets(literal, block=descriptor.block, word=descriptor.name)


def _is_lazy(value: object) -> bool:
    return isinstance(value, StaticWord) or (callable(value) and not isinstance(value, type))
