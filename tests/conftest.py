from __future__ import annotations

import os
import sys
from collections import Counter
from pathlib import Path
from typing import List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))


@pytest.fixture(autouse=True)
def _isolate_tern_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Interpreter knobs come from TERN_* variables; tests start from defaults."""
    for var in [name for name in os.environ if name.startswith("TERN_")]:
        monkeypatch.delenv(var)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Scenario ids double as test names; refuse duplicates."""
    del session
    del config

    counts = Counter(item.nodeid for item in items)
    duplicates = sorted(nodeid for nodeid, seen in counts.items() if seen > 1)

    if duplicates:
        lines = "\n".join(f"- {nodeid}" for nodeid in duplicates)
        raise pytest.UsageError(f"Duplicate pytest nodeids detected during collection:\n{lines}")
