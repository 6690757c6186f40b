"""Pipeline components for thread extraction."""

from emlthread.pipeline.assembler import AssembledMessage, ThreadAssembler, resolve_field
from emlthread.pipeline.headers import HeaderBlockParser, ParsedHeaderBlock
from emlthread.pipeline.normalizer import Normalizer, normalize
from emlthread.pipeline.segmenter import Segment, ThreadSegmenter

__all__ = [
    "AssembledMessage",
    "HeaderBlockParser",
    "normalize",
    "Normalizer",
    "ParsedHeaderBlock",
    "resolve_field",
    "Segment",
    "ThreadAssembler",
    "ThreadSegmenter",
]
