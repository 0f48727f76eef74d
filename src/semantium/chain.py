"""Append-only record of word uses, with prefix forking by replay."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Callable, Iterator, Sequence, TypeVar

from semantium.invariants import never

if TYPE_CHECKING:
    from semantium.catalog import WordDescriptor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Tail:
    def __repr__(self) -> str:
        return "TAIL"


TAIL = _Tail()
"""Fork point meaning "the current last element"."""


@dataclass(frozen=True, eq=False)
class ChainElement:
    word: WordDescriptor
    parameters: tuple[object, ...] | None = None
    previous: ChainElement | None = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.word.name


@dataclass(frozen=True, eq=False)
class StaticWordUse(ChainElement):
    pass


@dataclass(frozen=True, eq=False)
class ParametricWordUse(ChainElement):
    pass


def use_of(word: WordDescriptor, parameters: Sequence[object] | None = None) -> ChainElement:
    if parameters is None:
        return StaticWordUse(word)
    return ParametricWordUse(word, tuple(parameters))


class InstructionChain:
    """Ordered log of the words used during one traversal.

    Subclasses add domain fields and override ``on_instruction`` (called on
    every append, including replays) and ``finalize_recording``. A subclass
    whose constructor takes arguments must also override ``fork``.
    """

    def __init__(self) -> None:
        self.first_element: ChainElement | None = None
        self.last_element: ChainElement | None = None

    def on_instruction(self, element: ChainElement) -> None:
        pass

    def finalize_recording(self) -> object:
        return self

    def append(self, element: ChainElement) -> ChainElement:
        linked = replace(element, previous=self.last_element)
        if self.first_element is None:
            self.first_element = linked
        self.last_element = linked
        self.on_instruction(linked)
        return linked

    def enact(
        self,
        word: WordDescriptor,
        parameters: Sequence[object] | None = None,
        resolve: Callable[[object], T] | None = None,
    ) -> T | object:
        """Evaluate ``word`` with this chain as context and record its use.

        ``resolve`` turns the raw continuation into its resolved form before
        anything is appended, so a failing word leaves the chain untouched.
        """
        continuation = word.evaluate(self, parameters)
        if resolve is not None:
            continuation = resolve(continuation)
        element = self.append(use_of(word, parameters))
        word.instance.on_word_use(self, element)
        return continuation

    def history(self, through: ChainElement | None | _Tail = TAIL) -> list[ChainElement]:
        """Elements from the first one up to and including ``through``."""
        current = self.last_element
        if through is not TAIL:
            while current is not through:
                if current is None:
                    never("fork point is not part of this chain", chain=type(self).__name__)
                current = current.previous
        elements: list[ChainElement] = []
        while current is not None:
            elements.append(current)
            current = current.previous
        elements.reverse()
        return elements

    def __iter__(self) -> Iterator[ChainElement]:
        return iter(self.history())

    def replay_instructions(
        self,
        source: InstructionChain,
        after_element: ChainElement | None | _Tail = TAIL,
    ) -> None:
        for element in source.history(after_element):
            self.enact(element.word, element.parameters)

    def fork(self, after_element: ChainElement | None | _Tail = TAIL) -> InstructionChain:
        forked = type(self)()
        forked.replay_instructions(self, after_element)
        logger.debug("forked %s after %r", type(self).__name__, after_element)
        return forked
