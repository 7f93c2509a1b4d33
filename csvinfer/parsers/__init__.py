"""
Parsers sub-package for csvinfer.

Both parsers share one line pipeline (split -> skip blank/comment lines
-> tokenize -> detect types) defined on ``BaseParser`` and differ only
in how they feed it:

- batch.py: ``BatchParser`` runs the pipeline once over a complete text
  and establishes the schema from all rows.
- stream.py: ``StreamParser`` runs it per complete line batch of a
  fragment stream, establishing the schema from the first batch and
  widening it afterwards. Per-stream state lives in ``StreamSession``.
"""

from csvinfer.parsers.base import BaseParser, ParseResult
from csvinfer.parsers.batch import BatchParser
from csvinfer.parsers.stream import StreamParser, StreamSession

__all__ = ["BaseParser", "ParseResult", "BatchParser", "StreamParser", "StreamSession"]
