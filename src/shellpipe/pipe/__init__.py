"""
Pipe layer - the Pipe value, its filter engine, stages, and sinks.
"""

from shellpipe.pipe.core import PipeBase
from shellpipe.pipe.pipe import Pipe
from shellpipe.pipe.sinks import SinkResult

__all__ = [
    "Pipe",
    "PipeBase",
    "SinkResult",
]
