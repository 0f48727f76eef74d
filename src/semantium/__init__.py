"""Semantium package root."""

from semantium.blocks import (
    Hybrid,
    InitialInstructionBlock,
    InstructionBlock,
    continues_with,
    hybrid_word,
    static_word,
)
from semantium.chain import (
    ChainElement,
    InstructionChain,
    ParametricWordUse,
    StaticWordUse,
)
from semantium.dispatcher import substitute_chain
from semantium.exceptions import (
    AmbiguousGrammar,
    GrammarError,
    InvalidGrammarDefinition,
    NotCallable,
    ParametersExpected,
    UnknownContinuationBlock,
    UnknownWord,
    UnsupportedWordDefinition,
)
from semantium.grammar import Grammar, GrammarDefinition, define

__all__ = [
    "__version__",
    "AmbiguousGrammar",
    "ChainElement",
    "Grammar",
    "GrammarDefinition",
    "GrammarError",
    "Hybrid",
    "InitialInstructionBlock",
    "InstructionBlock",
    "InstructionChain",
    "InvalidGrammarDefinition",
    "NotCallable",
    "ParametersExpected",
    "ParametricWordUse",
    "StaticWordUse",
    "UnknownContinuationBlock",
    "UnknownWord",
    "UnsupportedWordDefinition",
    "continues_with",
    "define",
    "hybrid_word",
    "static_word",
    "substitute_chain",
]

__version__ = "0.1.0"
