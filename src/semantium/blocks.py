"""Authoring surface for grammar blocks.

A block is a class whose public members are *words*. A word names the
blocks (or the result type) that may follow it::

    class Start(InitialInstructionBlock):
        A = continues_with("Transition")

        def X(self, chain, amount):
            return continues_with("Transition")

        E = Hybrid(
            accessed=continues_with("Transition"),
            called=lambda self, chain, amount: continues_with("Transition"),
        )

    class Transition(InstructionBlock):
        then = continues_with(Start)

Every function that produces a continuation receives the block singleton and
the active chain, followed by the call parameters for parametric words.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Union

if TYPE_CHECKING:
    from semantium.chain import ChainElement, InstructionChain

Target = Union[type, str]
Continuation = tuple[Target, ...]

RESERVED_MEMBERS: frozenset[str] = frozenset({"on_word_use"})


class InstructionBlock:
    """Base class for grammar blocks; one singleton exists per grammar."""

    def on_word_use(self, chain: InstructionChain, element: ChainElement) -> None:
        """Called after one of this block's words was recorded on ``chain``."""


class InitialInstructionBlock(InstructionBlock):
    """Block whose words are available on the entry dictionary."""


def continues_with(*targets: Target) -> Continuation:
    return tuple(targets)


@dataclass(frozen=True)
class StaticWord:
    """Static word whose continuation is computed each time it is used."""

    func: Callable[..., Any]

    def evaluate(self, block: InstructionBlock, chain: InstructionChain) -> object:
        return self.func(block, chain)


def static_word(func: Callable[..., Any]) -> StaticWord:
    return StaticWord(func)


@dataclass(frozen=True)
class Hybrid:
    """A word that may either be accessed directly or called with parameters.

    ``accessed`` is a literal continuation or a function ``(self, chain)``
    evaluated lazily; ``called`` is a function ``(self, chain, *params)``.
    """

    accessed: object = None
    called: Callable[..., Any] | None = None

    def accessor(self, func: Callable[..., Any]) -> Hybrid:
        return replace(self, accessed=func)

    def caller(self, func: Callable[..., Any]) -> Hybrid:
        return replace(self, called=func)

    @property
    def complete(self) -> bool:
        return self.accessed is not None and self.called is not None


def hybrid_word(func: Callable[..., Any]) -> Hybrid:
    """Start a hybrid word from its called form; add ``@name.accessor`` next."""
    return Hybrid(called=func)


def is_block_type(value: object) -> bool:
    return isinstance(value, type) and issubclass(value, InstructionBlock)


def is_initial_block_type(value: object) -> bool:
    return isinstance(value, type) and issubclass(value, InitialInstructionBlock)


def declared_members(block_type: type[InstructionBlock]) -> dict[str, object]:
    """Collect the members a block declares, base classes first.

    The engine's own base classes contribute nothing; user base classes
    between them and ``block_type`` do, and subclasses override.
    """
    members: dict[str, object] = {}
    for klass in reversed(block_type.__mro__):
        if klass in _ENGINE_BASES:
            continue
        for name, value in vars(klass).items():
            if name.startswith("_") or name in RESERVED_MEMBERS:
                continue
            members[name] = value
    return members


_ENGINE_BASES: frozenset[type] = frozenset({object, InstructionBlock, InitialInstructionBlock})
