"""Error taxonomy for grammar compilation and traversal."""

from __future__ import annotations


class GrammarError(RuntimeError):
    """Base class for every error raised while compiling or walking a grammar.

    Subclasses keep their context as attributes so callers (and the command
    line) can report them without parsing the message.
    """

    def __init__(self, message: str, **context: object):
        super().__init__(message)
        self.context = context

    @property
    def details(self) -> dict[str, object]:
        payload: dict[str, object] = {"kind": type(self).__name__, "message": str(self)}
        for key, value in self.context.items():
            payload[key] = _describe(value)
        return payload


class InvalidGrammarDefinition(GrammarError, TypeError):
    pass


class UnsupportedWordDefinition(GrammarError):
    def __init__(self, block: type, word: str, value: object):
        super().__init__(
            f"{block.__name__}.{word}: unsupported word definition {value!r}",
            block=block,
            word=word,
        )
        self.block = block
        self.word = word
        self.value = value


class UnknownContinuationBlock(GrammarError):
    def __init__(self, target: object, *, block: type | None = None, word: str = ""):
        where = f"{block.__name__}.{word}: " if block is not None else ""
        super().__init__(
            f"{where}continuation {target!r} is not part of the grammar",
            target=target,
            block=block,
            word=word,
        )
        self.target = target
        self.block = block
        self.word = word


class AmbiguousGrammar(GrammarError):
    def __init__(self, word: str, blocks: tuple[type, ...]):
        names = ", ".join(block.__name__ for block in blocks)
        super().__init__(
            f"word {word!r} is defined by several reachable blocks: {names}",
            word=word,
            blocks=blocks,
        )
        self.word = word
        self.blocks = blocks


class UnknownWord(GrammarError, AttributeError):
    def __init__(self, word: str, available: tuple[str, ...] = ()):
        message = f"word {word!r} is not permitted here"
        if available:
            message += f" (expected one of: {', '.join(available)})"
        super().__init__(message, word=word, available=available)
        self.word = word
        self.available = available


class NotCallable(GrammarError, TypeError):
    def __init__(self, word: str = ""):
        subject = f"word {word!r}" if word else "this position"
        super().__init__(f"{subject} does not take parameters", word=word)
        self.word = word


class ParametersExpected(GrammarError, AttributeError):
    def __init__(self, word: str, attempted: str = ""):
        super().__init__(
            f"word {word!r} expects parameters before {attempted or 'the next word'!r}",
            word=word,
            attempted=attempted,
        )
        self.word = word
        self.attempted = attempted


class NeverThrown(RuntimeError):
    """Raised by ``invariants.never`` when a supposedly unreachable path runs."""

    def __init__(self, message: str, **env: object):
        super().__init__(message)
        self.env = env


def _describe(value: object) -> object:
    if isinstance(value, type):
        return value.__name__
    if isinstance(value, tuple):
        return [_describe(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)
