from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from semantium import Grammar
from tests.harness import simple_grammar


@pytest.fixture
def grammar() -> Grammar:
    return simple_grammar.build()


@pytest.fixture
def dictionary(grammar: Grammar):
    return grammar.root


@pytest.fixture
def repo_root() -> Path:
    return ROOT
