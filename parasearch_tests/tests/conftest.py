import pytest

from core.governor import ConcurrencyGovernor


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool registration."""

    def __init__(self) -> None:
        self.tools = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def governor():
    # Small capacity so concurrent tests actually contend for permits
    return ConcurrencyGovernor(capacity=2)
