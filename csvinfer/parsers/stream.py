"""
Incremental parser for chunked CSV text.

A ``StreamParser`` holds only options. Each stream gets its own
``StreamSession`` (from ``begin_session()``), so one parser can drive
any number of concurrent streams without sharing state.

Per fragment the session:

1. Appends the fragment to its pending buffer.
2. Cuts the buffer after the last ``\\n`` / ``\\r``. Only the complete
   lines before the cut are processed; the partial tail stays pending.
   A fragment without a terminator is only buffered.
3. Drops blank and comment lines, takes the header if it has not been
   seen yet, and types the remaining lines.
4. Establishes the schema from the first batch that has a header or a
   data row (a header-only batch yields all-``string`` columns),
   otherwise widens the existing schema.
5. Appends the rows (never more than ``max_rows`` in total) and returns
   a snapshot when rows were added or the schema was just established.

At end of input the pending tail is processed as one last line. Once
``max_rows`` is reached the pending buffer is discarded and no further
fragments are read.

``StreamParser.stream()`` wraps this in an async generator: it suspends
while waiting for the next fragment and at every ``yield`` until the
consumer asks for the next snapshot. The upstream source is closed on
every exit path (end of input, row limit, consumer cancellation,
source failure).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from pathlib import Path
from typing import Union

from csvinfer.detect import TypedCell
from csvinfer.exceptions import SessionError
from csvinfer.parsers.base import BaseParser, ParseResult
from csvinfer.reader import DEFAULT_CHUNK_SIZE, iter_text_chunks
from csvinfer.schema import assemble_row, establish, merge
from csvinfer.tokenizer import split_processable

logger = logging.getLogger(__name__)

FragmentSource = Union[str, Iterable[str], AsyncIterable[str]]


class StreamSession:
    """State of one streaming parse.

    Attributes:
        pending: Text received after the last line terminator.
        schema_established: Whether the header/columns are known.
        limit_reached: Whether ``max_rows`` rows have been collected.
        finished: Whether ``finish()`` has been called.
        result: The accumulated result. Callers receive snapshots of it,
            never the object itself.
    """

    def __init__(self, parser: BaseParser) -> None:
        self._parser = parser
        self._header_pending = parser.options.header
        self.pending = ""
        self.schema_established = False
        self.limit_reached = False
        self.finished = False
        self.result = ParseResult()

    @property
    def done(self) -> bool:
        return self.finished or self.limit_reached

    def feed(self, fragment: str) -> ParseResult | None:
        """Process one fragment.

        Returns:
            A snapshot of the accumulated result, or ``None`` when the
            fragment added no rows and did not establish the schema.

        Raises:
            SessionError: If the session has already finished.
        """
        if self.finished:
            raise SessionError("Cannot feed a finished stream session")
        if self.limit_reached:
            return None

        self.pending += fragment
        processable, self.pending = split_processable(self.pending)
        if not processable:
            return None
        return self._process(processable)

    def finish(self) -> ParseResult | None:
        """Flush the unterminated tail as a final line and close the session."""
        if self.finished:
            raise SessionError("Stream session already finished")
        self.finished = True

        tail, self.pending = self.pending, ""
        if self.limit_reached or not tail:
            return None
        return self._process(tail)

    def _process(self, text: str) -> ParseResult | None:
        parser = self._parser
        options = parser.options
        lines = parser._data_lines(text)

        header_row: list[str] | None = None
        if self._header_pending and lines:
            header_row = parser._tokenize(lines[0])
            lines = lines[1:]
            self._header_pending = False

        if options.max_rows is not None:
            lines = lines[: options.max_rows - len(self.result.rows)]

        typed_rows: list[list[TypedCell]] = [parser._type_row(line) for line in lines]

        established_now = False
        if not self.schema_established:
            if header_row is None and not typed_rows:
                return None
            self.result.header, self.result.columns = establish(typed_rows, header_row)
            self.schema_established = True
            established_now = True
        else:
            self.result.columns = merge(self.result.columns, typed_rows)

        for cells in typed_rows:
            self.result.rows.append(
                assemble_row(cells, self.result.header, self.result.columns, options.row_mode)
            )

        if options.max_rows is not None and len(self.result.rows) >= options.max_rows:
            self.limit_reached = True
            self.pending = ""

        if not typed_rows and not established_now:
            return None
        return self.result.snapshot()


class StreamParser(BaseParser):
    """Parser for a sequence of text fragments."""

    def begin_session(self) -> StreamSession:
        """Start an independent parse session with this parser's options."""
        return StreamSession(self)

    async def stream(self, source: FragmentSource) -> AsyncIterator[ParseResult]:
        """Parse fragments from *source*, yielding a snapshot per useful fragment.

        Args:
            source: An async iterable or iterable of text fragments. A
                plain ``str`` is treated as a single fragment.

        Yields:
            Cumulative ``ParseResult`` snapshots. Each one extends the
            previous one.

        Raises:
            Whatever the source raises; no snapshot follows a failure.
        """
        session = self.begin_session()
        fragments = _as_async_iterator(source)
        count = 0
        try:
            async for fragment in fragments:
                count += 1
                snapshot = session.feed(fragment)
                logger.debug(
                    "Fragment %d: %d chars, %d rows so far",
                    count, len(fragment), len(session.result.rows),
                )
                if snapshot is not None:
                    yield snapshot
                if session.limit_reached:
                    logger.info(
                        "Row limit (%d) reached after %d fragment(s); stopping",
                        self.options.max_rows, count,
                    )
                    return

            snapshot = session.finish()
            if snapshot is not None:
                yield snapshot
            logger.info(
                "Stream complete: %d fragment(s), %d rows x %d columns",
                count, len(session.result.rows), len(session.result.columns),
            )
        finally:
            await _close(fragments)

    def stream_file(
        self,
        path: str | Path,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> AsyncIterator[ParseResult]:
        """Stream a file in *chunk_size* character fragments."""
        logger.info("Streaming file %s (encoding=%s)", path, self.options.encoding)
        return self.stream(iter_text_chunks(path, self.options.encoding, chunk_size))


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _as_async_iterator(source: FragmentSource) -> AsyncIterator[str]:
    if isinstance(source, str):
        return _from_sync([source])
    if isinstance(source, AsyncIterable):
        return aiter(source)
    return _from_sync(source)


async def _from_sync(fragments: Iterable[str]) -> AsyncIterator[str]:
    iterator = iter(fragments)
    try:
        for fragment in iterator:
            yield fragment
    finally:
        close = getattr(iterator, "close", None)
        if close is not None:
            close()


async def _close(fragments: AsyncIterator[str]) -> None:
    aclose = getattr(fragments, "aclose", None)
    if aclose is not None:
        await aclose()
