"""
Shared test fixtures for csvinfer tests.

Async helpers drive the streaming API from synchronous tests via
``asyncio.run()``, so no async test plugin is needed.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable

import pytest

from csvinfer.parsers.base import ParseResult

# ---------------------------------------------------------------------------
# Streaming helpers
# ---------------------------------------------------------------------------
class TrackingSource:
    """Async fragment source that records how far it was consumed."""

    def __init__(self, fragments: Iterable[str], fail_after: int | None = None) -> None:
        self.fragments = list(fragments)
        self.fail_after = fail_after
        self.pulled = 0
        self.closed = False

    def __aiter__(self) -> AsyncIterator[str]:
        return self._run()

    async def _run(self) -> AsyncIterator[str]:
        try:
            for fragment in self.fragments:
                if self.fail_after is not None and self.pulled >= self.fail_after:
                    raise OSError("upstream went away")
                self.pulled += 1
                yield fragment
        finally:
            self.closed = True


async def _collect(stream: AsyncIterator[ParseResult]) -> list[ParseResult]:
    return [snapshot async for snapshot in stream]


def collect(stream: AsyncIterator[ParseResult]) -> list[ParseResult]:
    """Run an async snapshot stream to completion and return all snapshots."""
    return asyncio.run(_collect(stream))


@pytest.fixture()
def collect_stream():
    return collect


@pytest.fixture()
def tracking_source():
    return TrackingSource


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: end-to-end tests that touch the filesystem",
    )
