"""Grammar definition, compilation and entry points."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Sequence

from semantium.blocks import InstructionBlock
from semantium.catalog import Catalog, WordDescriptor, compile_catalog
from semantium.chain import InstructionChain
from semantium.continuation import ContinuationResolver, ContinuationSet
from semantium.dispatcher import Dispatcher, EntryDictionary, grammar_of
from semantium.exceptions import InvalidGrammarDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrammarDefinition:
    blocks: tuple[type[InstructionBlock], ...]
    result: type
    chain_builder: type[InstructionChain] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "blocks", tuple(self.blocks))
        if not isinstance(self.result, type):
            raise InvalidGrammarDefinition(f"result must be a class, got {self.result!r}")
        builder = self.chain_builder if self.chain_builder is not None else self.result
        if not (isinstance(builder, type) and issubclass(builder, InstructionChain)):
            raise InvalidGrammarDefinition(
                f"{getattr(builder, '__name__', builder)!r} cannot build instruction chains; "
                "pass an InstructionChain subclass as chain_builder or result",
                chain_builder=builder,
            )

    @property
    def builder(self) -> type[InstructionChain]:
        return self.chain_builder if self.chain_builder is not None else self.result


class Grammar:
    """A compiled grammar: catalog, continuation resolver and entry points."""

    def __init__(self, definition: GrammarDefinition):
        self.definition = definition
        self.catalog: Catalog = compile_catalog(definition.blocks, definition.result)
        if not self.catalog.initial_blocks:
            raise InvalidGrammarDefinition("a grammar needs at least one InitialInstructionBlock")
        self.resolver = ContinuationResolver(self.catalog)
        logger.debug(
            "compiled grammar with result %s from %s",
            definition.result.__name__,
            [block.__name__ for block in self.catalog.blocks],
        )

    @classmethod
    def compile(
        cls,
        blocks: Sequence[type[InstructionBlock]],
        result: type,
        chain_builder: type[InstructionChain] | None = None,
    ) -> Grammar:
        return cls(GrammarDefinition(tuple(blocks), result, chain_builder))

    @property
    def result(self) -> type:
        return self.definition.result

    @property
    def initial_blocks(self) -> tuple[type[InstructionBlock], ...]:
        return self.catalog.initial_blocks

    @cached_property
    def root(self) -> EntryDictionary:
        return EntryDictionary(self, self.entry_continuation())

    def entry_continuation(self) -> ContinuationSet:
        return self.resolver.resolve(self.catalog.initial_blocks)

    def new_chain(self) -> InstructionChain:
        return self.definition.builder()

    def step(
        self,
        chain: InstructionChain,
        word: WordDescriptor,
        parameters: Sequence[object] | None = None,
    ) -> ContinuationSet:
        return chain.enact(
            word,
            parameters,
            resolve=lambda raw: self.resolver.resolve(raw, word=word),
        )

    def finalize(self, chain: InstructionChain) -> object:
        return chain.finalize_recording()

    def primed_with(self, chain: InstructionChain) -> EntryDictionary:
        """Entry dictionary whose traversals all start from ``chain``'s history."""
        return EntryDictionary(self, self.entry_continuation(), primed=chain)

    def continuation_with(self, blocks: Iterable[type]) -> EntryDictionary:
        """Entry dictionary rooted at ``blocks`` instead of the initial blocks."""
        return EntryDictionary(self, self.resolver.resolve(tuple(blocks)))


def define(
    blocks: Sequence[type[InstructionBlock]],
    result: type,
    chain_builder: type[InstructionChain] | None = None,
) -> EntryDictionary:
    return Grammar.compile(blocks, result, chain_builder).root


def as_grammar(value: object) -> Grammar:
    if isinstance(value, Grammar):
        return value
    if isinstance(value, GrammarDefinition):
        return Grammar(value)
    if isinstance(value, Dispatcher):
        return grammar_of(value)
    raise TypeError(f"{type(value).__name__} is neither a grammar, a definition nor a grammar position")
