"""
Self-contained compressed format, so a file can be decompressed without the
original input:

    4 bytes   magic b"HUF1"
    8 bytes   symbol count, big-endian unsigned
    rest      one bitstream: preorder tree (absent when the count is 0), then
              the packed codes, zero-padded to a whole byte

The symbol count tells the decoder where the payload ends, so pad bits are
never decoded.
"""

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from bitio import BitReader, BitWriter
from errors import CorruptStreamError, TruncatedStreamError
from huffman import (build_huffman_tree, count_frequencies, generate_huffman_codes,
                     huffman_decode, huffman_encode, read_tree, write_tree)

MAGIC = b"HUF1"
COUNT_FORMAT = ">Q"
HEADER_SIZE = len(MAGIC) + struct.calcsize(COUNT_FORMAT)

PathLike = Union[str, Path]


@dataclass
class CompressionStats:
    input_bytes: int
    output_bytes: int
    unique_symbols: int
    tree_bits: int
    payload_bits: int
    pad_bits: int

    @property
    def compression_ratio(self) -> float: # compressed / original, lower is better
        return self.output_bytes / max(1, self.input_bytes)

    @property
    def bits_per_symbol(self) -> float:
        return self.payload_bits / max(1, self.input_bytes)


def _encode(data: bytes) -> Tuple[bytes, CompressionStats]:
    frequencies, symbols = count_frequencies(data)
    root = build_huffman_tree(frequencies, symbols)

    writer = BitWriter()
    tree_bits = 0
    if root is not None:
        write_tree(root, writer)
        tree_bits = writer.bit_length
        huffman_encode(data, generate_huffman_codes(root), writer)

    blob = MAGIC + struct.pack(COUNT_FORMAT, len(data)) + writer.finish()
    stats = CompressionStats(
        input_bytes=len(data),
        output_bytes=len(blob),
        unique_symbols=len(frequencies),
        tree_bits=tree_bits,
        payload_bits=writer.bit_length - tree_bits,
        pad_bits=writer.pad_bits,
    )
    return blob, stats


def compress(data: bytes) -> bytes:
    return _encode(bytes(data))[0]


def analyze(data: bytes) -> CompressionStats:
    return _encode(bytes(data))[1]


def read_header(blob: bytes) -> int:
    """Validate the header and return the symbol count."""
    if len(blob) < len(MAGIC) or blob[:len(MAGIC)] != MAGIC:
        raise CorruptStreamError("not a Huffman container (bad magic)")
    if len(blob) < HEADER_SIZE:
        raise TruncatedStreamError("container header is incomplete")
    (count,) = struct.unpack_from(COUNT_FORMAT, blob, len(MAGIC))
    return count


def decompress(blob: bytes) -> bytes:
    count = read_header(blob)
    reader = BitReader(blob[HEADER_SIZE:])
    root = read_tree(reader) if count else None
    decoded = huffman_decode(reader, root, count)
    if reader.remaining >= 8: # more than the final byte's padding is left over
        raise CorruptStreamError(f"{reader.remaining} unexpected trailing bits after payload")
    return bytes(decoded)


def compress_file(src: PathLike, dst: PathLike) -> CompressionStats:
    # everything is encoded in memory first, dst is only opened once that succeeded
    data = Path(src).read_bytes()
    blob, stats = _encode(data)
    with Path(dst).open("wb") as f:
        f.write(blob)
    return stats


def decompress_file(src: PathLike, dst: PathLike) -> int:
    data = decompress(Path(src).read_bytes())
    with Path(dst).open("wb") as f:
        f.write(data)
    return len(data)
