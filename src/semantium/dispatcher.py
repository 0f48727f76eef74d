"""Traversal cursors that turn attribute access and calls into word uses.

Every cursor (dispatcher, pending parametric word, pending hybrid word)
follows the same rule: the first access through it extends the chain it
holds, and every later access first forks that chain from the element that
was last when the cursor was created. Reusing a stored position therefore
never leaks words from one branch into another.

Only dunder and underscore-prefixed attributes exist on cursor objects, so
nothing here can shadow a grammar word.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from semantium.catalog import WordDescriptor, WordKind
from semantium.chain import InstructionChain
from semantium.continuation import ContinuationSet, InstructionStep, InvalidStep, ResultStep
from semantium.exceptions import NotCallable, ParametersExpected, UnknownWord
from semantium.invariants import never, require_not_none

if TYPE_CHECKING:
    from semantium.grammar import Grammar

logger = logging.getLogger(__name__)

_UNSET = object()


class _Cursor:
    def __init__(self, grammar: Grammar, chain: InstructionChain | None):
        self._grammar = grammar
        self._chain = chain
        self._origin = chain.last_element if chain is not None else None
        self._consulted = False

    def _take_chain(self) -> InstructionChain:
        chain = require_not_none(self._chain, reason="cursor without a chain", cursor=type(self).__name__)
        if not self._consulted:
            self._consulted = True
            return chain
        return chain.fork(self._origin)

    def _scratch_chain(self) -> InstructionChain:
        chain = require_not_none(self._chain, reason="cursor without a chain", cursor=type(self).__name__)
        return chain.fork(self._origin)

    def _next(self, chain: InstructionChain, continuation: ContinuationSet) -> Dispatcher:
        return Dispatcher(self._grammar, chain, continuation)

    def _result_has(self, name: str, scratch: Callable[[], InstructionChain]) -> bool:
        """Whether the finalized result exposes ``name``; finalizes ``scratch()`` only if needed."""
        if hasattr(self._grammar.result, name):
            return True
        return hasattr(self._grammar.finalize(scratch()), name)


class Dispatcher(_Cursor):
    """A position in the grammar: words are attributes, results are members."""

    def __init__(self, grammar: Grammar, chain: InstructionChain | None, continuation: ContinuationSet):
        super().__init__(grammar, chain)
        self._continuation = continuation
        self._result: object = _UNSET

    def __getattr__(self, name: str) -> object:
        if name.startswith("_"):
            raise AttributeError(name)
        step = self._continuation.resolve(name)
        if isinstance(step, InstructionStep):
            return self._use(step.word)
        if isinstance(step, ResultStep):
            return self._result_member(name)
        raise UnknownWord(name, self._continuation.word_names())

    def __call__(self, *parameters: object) -> object:
        raise NotCallable()

    def __contains__(self, name: object) -> bool:
        return name in self._continuation.word_index

    def __dir__(self) -> list[str]:
        names = set(self._continuation.word_names())
        if self._continuation.allows_result_access:
            names.update(name for name in dir(self._grammar.result) if not name.startswith("_"))
        return sorted(names)

    def __repr__(self) -> str:
        words = ", ".join(self._continuation.word_names())
        suffix = ", result" if self._continuation.allows_result_access else ""
        return f"<{type(self).__name__} [{words}]{suffix}>"

    def _use(self, word: WordDescriptor) -> object:
        chain = self._take_chain()
        if word.kind is WordKind.STATIC:
            return self._next(chain, self._grammar.step(chain, word))
        if word.kind is WordKind.PARAMETRIC:
            return ParametricWord(self._grammar, chain, word)
        if word.kind is WordKind.HYBRID:
            return HybridWord(self._grammar, chain, word)
        never("unknown word kind", word=word.qualified_name, kind=word.kind)

    def _result_member(self, name: str, *, verified: bool = False) -> object:
        if self._result is _UNSET and not verified and not self._result_has(name, self._scratch_chain):
            raise UnknownWord(name, self._continuation.word_names())
        result = self._finalized()
        value = getattr(result, name, _UNSET)
        if value is _UNSET:
            raise UnknownWord(name, self._continuation.word_names())
        return value

    def _finalized(self) -> object:
        if self._result is _UNSET:
            chain = self._take_chain()
            self._result = self._grammar.finalize(chain)
            logger.debug("finalized %s into %s", type(chain).__name__, type(self._result).__name__)
        return self._result


class EntryDictionary(Dispatcher):
    """Root position; every access starts from an independent chain.

    Without a primed chain each access builds a new chain; with one, each
    access forks the primed chain's full history.
    """

    def __init__(
        self,
        grammar: Grammar,
        continuation: ContinuationSet,
        primed: InstructionChain | None = None,
    ):
        super().__init__(grammar, primed, continuation)
        self._consulted = True

    def _take_chain(self) -> InstructionChain:
        if self._chain is None:
            return self._grammar.new_chain()
        return self._chain.fork(self._origin)

    def _scratch_chain(self) -> InstructionChain:
        return self._take_chain()


class ParametricWord(_Cursor):
    """A parametric word awaiting its call parameters."""

    def __init__(self, grammar: Grammar, chain: InstructionChain, word: WordDescriptor):
        super().__init__(grammar, chain)
        self._word = word

    def __call__(self, *parameters: object) -> Dispatcher:
        chain = self._take_chain()
        return self._next(chain, self._grammar.step(chain, self._word, parameters))

    def __getattr__(self, name: str) -> object:
        if name.startswith("_"):
            raise AttributeError(name)
        raise ParametersExpected(self._word.name, name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._word.qualified_name}(...)>"


class HybridWord(ParametricWord):
    """A hybrid word: call it with parameters or go on to the next word."""

    def __getattr__(self, name: str) -> object:
        if name.startswith("_"):
            raise AttributeError(name)
        chain = self._take_chain()

        def scratch() -> InstructionChain:
            trial = chain.fork()
            trial.enact(self._word, None)
            return trial

        def resolve(raw: object) -> ContinuationSet:
            continuation = self._grammar.resolver.resolve(raw, word=self._word)
            step = continuation.resolve(name)
            if isinstance(step, InvalidStep) or (
                isinstance(step, ResultStep) and not self._result_has(name, scratch)
            ):
                raise UnknownWord(name, continuation.word_names())
            return continuation

        continuation = chain.enact(self._word, None, resolve=resolve)
        position = self._next(chain, continuation)
        if isinstance(continuation.resolve(name), ResultStep):
            return position._result_member(name, verified=True)
        return getattr(position, name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._word.qualified_name}>"


def substitute_chain(position: Dispatcher, chain: InstructionChain) -> Dispatcher:
    """Continue from ``position`` while recording onto ``chain`` instead."""
    if not isinstance(position, Dispatcher):
        raise TypeError(f"expected a grammar position, got {type(position).__name__}")
    return Dispatcher(position._grammar, chain, position._continuation)


def grammar_of(position: _Cursor) -> Grammar:
    return position._grammar
