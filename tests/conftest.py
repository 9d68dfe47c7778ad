import sys
import os
from pathlib import Path

import pytest

# Ensure project root is on sys.path for `import practice_coach.*`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Default: keep the chat provider on the deterministic mock unless a test opts in
os.environ.setdefault("AI_PROVIDER_CHAT", "mock")


def run_inline(fn):
    fn()


@pytest.fixture
def inline_scheduler():
    """Deliver tracker notifications synchronously."""
    return run_inline
