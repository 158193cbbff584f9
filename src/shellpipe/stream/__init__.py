"""
Stream layer - readers, line scanning, and the rendezvous channel.

Every pipe stage reads from and writes to the objects defined here.
"""

from shellpipe.stream.channel import ChannelReader, ChannelWriter, channel
from shellpipe.stream.reader import (
    CHUNK_SIZE,
    ChainReader,
    IterReader,
    ManagedReader,
    Reader,
    TeeReader,
    Writer,
    iter_chunks,
    read_all,
)
from shellpipe.stream.scan import decode, encode, scan_lines

__all__ = [
    "CHUNK_SIZE",
    "ChainReader",
    "ChannelReader",
    "ChannelWriter",
    "IterReader",
    "ManagedReader",
    "Reader",
    "TeeReader",
    "Writer",
    "channel",
    "decode",
    "encode",
    "iter_chunks",
    "read_all",
    "scan_lines",
]
