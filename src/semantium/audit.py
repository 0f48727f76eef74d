"""Structural reachability audit and catalog description.

The audit only follows continuations that are known without running user
code: literal static words and literal ``accessed`` values of hybrid
words. Everything else is reported as opaque, and opaque words soften the
reachability verdicts to warnings.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable

from semantium.catalog import Catalog, WordDescriptor, WordKind
from semantium.continuation import build_continuation_set
from semantium.exceptions import AmbiguousGrammar, UnknownContinuationBlock
from semantium.grammar import Grammar
from semantium.schema import (
    AuditFindingDTO,
    AuditReportDTO,
    BlockDTO,
    CatalogDTO,
    WordDTO,
)


class FindingKind(str, Enum):
    AMBIGUOUS = "ambiguous"
    UNKNOWN_CONTINUATION = "unknown_continuation"
    UNREACHABLE_BLOCK = "unreachable_block"
    OPAQUE_WORD = "opaque_word"
    RESULT_UNREACHABLE = "result_unreachable"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class AuditFinding:
    kind: FindingKind
    severity: Severity
    message: str
    block: str = ""
    word: str = ""


@dataclass(frozen=True)
class AuditReport:
    grammar: str
    findings: tuple[AuditFinding, ...] = ()
    reachable_blocks: tuple[str, ...] = ()
    positions: int = 0

    @property
    def errors(self) -> tuple[AuditFinding, ...]:
        return tuple(f for f in self.findings if f.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[AuditFinding, ...]:
        return tuple(f for f in self.findings if f.severity is Severity.WARNING)

    def filtered(self, ignore: Iterable[str]) -> AuditReport:
        ignored = {str(kind).strip().lower() for kind in ignore}
        return replace(
            self,
            findings=tuple(f for f in self.findings if f.kind.value not in ignored),
        )

    def to_dto(self) -> AuditReportDTO:
        return AuditReportDTO(
            grammar=self.grammar,
            findings=[
                AuditFindingDTO(
                    kind=finding.kind.value,
                    severity=finding.severity.value,
                    message=finding.message,
                    block=finding.block,
                    word=finding.word,
                )
                for finding in self.findings
            ],
            reachable_blocks=list(self.reachable_blocks),
            positions=self.positions,
            errors=len(self.errors),
            warnings=len(self.warnings),
        )


@dataclass
class _Walk:
    catalog: Catalog
    findings: list[AuditFinding] = field(default_factory=list)
    reachable: list[type] = field(default_factory=list)
    opaque: dict[str, WordDescriptor] = field(default_factory=dict)
    reported: set[tuple[str, ...]] = field(default_factory=set)
    result_reachable: bool = False

    def report(self, key: tuple[str, ...], finding: AuditFinding) -> None:
        if key in self.reported:
            return
        self.reported.add(key)
        self.findings.append(finding)


def audit_grammar(grammar: Grammar, *, name: str = "") -> AuditReport:
    catalog = grammar.catalog
    walk = _Walk(catalog)
    start = catalog.initial_blocks
    seen: set[frozenset[type]] = {frozenset(start)}
    queue: deque[tuple[type, ...]] = deque([start])
    positions = 0

    while queue:
        targets = queue.popleft()
        positions += 1
        if catalog.result in targets:
            walk.result_reachable = True
        try:
            build_continuation_set(catalog, targets)
        except AmbiguousGrammar as exc:
            owners = tuple(block.__name__ for block in exc.blocks)
            walk.report(
                ("ambiguous", exc.word, *owners),
                AuditFinding(
                    kind=FindingKind.AMBIGUOUS,
                    severity=Severity.ERROR,
                    message=str(exc),
                    block=", ".join(owners),
                    word=exc.word,
                ),
            )
        for block in targets:
            if block is catalog.result:
                continue
            if block not in walk.reachable:
                walk.reachable.append(block)
            for word in catalog.by_block[block].values():
                for successor in _successors(walk, word):
                    key = frozenset(successor)
                    if key not in seen:
                        seen.add(key)
                        queue.append(successor)

    has_opaque = bool(walk.opaque)
    for qualified, word in walk.opaque.items():
        walk.findings.append(
            AuditFinding(
                kind=FindingKind.OPAQUE_WORD,
                severity=Severity.INFO,
                message=f"{qualified} ({word.kind.value}) continues with targets only known at run time",
                block=word.block.__name__,
                word=word.name,
            )
        )
    for block in catalog.blocks:
        if block in walk.reachable:
            continue
        walk.findings.append(
            AuditFinding(
                kind=FindingKind.UNREACHABLE_BLOCK,
                severity=Severity.WARNING if has_opaque else Severity.ERROR,
                message=f"block {block.__name__} is not reachable through literal continuations",
                block=block.__name__,
            )
        )
    if not walk.result_reachable:
        walk.findings.append(
            AuditFinding(
                kind=FindingKind.RESULT_UNREACHABLE,
                severity=Severity.WARNING if has_opaque else Severity.ERROR,
                message=f"no literal continuation grants access to {catalog.result.__name__}",
            )
        )

    return AuditReport(
        grammar=name or catalog.result.__name__,
        findings=tuple(walk.findings),
        reachable_blocks=tuple(block.__name__ for block in walk.reachable),
        positions=positions,
    )


def _successors(walk: _Walk, word: WordDescriptor) -> list[tuple[type, ...]]:
    if word.kind is not WordKind.STATIC:
        walk.opaque.setdefault(word.qualified_name, word)
    literal = word.literal_continuation
    if literal is None:
        walk.opaque.setdefault(word.qualified_name, word)
        return []
    try:
        return [walk.catalog.normalize_targets(literal, block=word.block, word=word.name)]
    except UnknownContinuationBlock as exc:
        walk.report(
            ("unknown", word.qualified_name),
            AuditFinding(
                kind=FindingKind.UNKNOWN_CONTINUATION,
                severity=Severity.ERROR,
                message=str(exc),
                block=word.block.__name__,
                word=word.name,
            ),
        )
        return []


def describe_catalog(grammar: Grammar) -> CatalogDTO:
    catalog = grammar.catalog
    blocks: list[BlockDTO] = []
    words: list[WordDTO] = []
    for block in catalog.blocks:
        block_words = catalog.by_block[block]
        blocks.append(
            BlockDTO(
                name=block.__name__,
                initial=block in catalog.initial_blocks,
                words=list(block_words),
            )
        )
        for word in block_words.values():
            literal = word.literal_continuation
            continuation = None
            if literal is not None:
                continuation = [
                    target.__name__
                    for target in catalog.normalize_targets(literal, block=block, word=word.name)
                ]
            words.append(
                WordDTO(
                    name=word.name,
                    block=block.__name__,
                    kind=word.kind.value,
                    continuation=continuation,
                )
            )
    return CatalogDTO(
        result=catalog.result.__name__,
        chain_builder=grammar.definition.builder.__name__,
        initial_blocks=[block.__name__ for block in catalog.initial_blocks],
        blocks=blocks,
        words=words,
    )
