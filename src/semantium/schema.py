from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class WordDTO(BaseModel):
    name: str
    block: str
    kind: str
    continuation: Optional[List[str]] = None


class BlockDTO(BaseModel):
    name: str
    initial: bool
    words: List[str]


class CatalogDTO(BaseModel):
    result: str
    chain_builder: str
    initial_blocks: List[str]
    blocks: List[BlockDTO]
    words: List[WordDTO]


class AuditFindingDTO(BaseModel):
    kind: str
    severity: str
    message: str
    block: str = ""
    word: str = ""


class AuditReportDTO(BaseModel):
    grammar: str
    findings: List[AuditFindingDTO] = []
    reachable_blocks: List[str] = []
    positions: int = 0
    errors: int = 0
    warnings: int = 0
