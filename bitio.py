from typing import BinaryIO, Iterator, Optional

from errors import TruncatedStreamError


class BitWriter:
    """
    Bit sink: packs bits MSB-first into bytes
    The last partial byte is padded with 0 bits when the writer is finished
    """

    def __init__(self, stream: Optional[BinaryIO] = None) -> None:
        self.stream = stream # optional binary file, receives the packed bytes on close()
        self.buf = bytearray()
        self.acc = 0
        self.acc_bits = 0
        self.bit_length = 0 # meaningful bits written so far (padding excluded)
        self.closed = False

    def __enter__(self) -> "BitWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Only flush when the block succeeded, never leave a partial payload behind
        self.close(flush=exc_type is None)

    def write_bit(self, bit) -> None:
        if self.closed:
            raise ValueError("write to a closed BitWriter")
        if bit not in (0, 1):
            raise ValueError(f"bit must be 0 or 1, got {bit!r}")
        self.acc = (self.acc << 1) | int(bit)
        self.acc_bits += 1
        self.bit_length += 1
        if self.acc_bits == 8:
            self.buf.append(self.acc & 0xFF)
            self.acc = 0
            self.acc_bits = 0

    def write_bits(self, code: str) -> None: # code: string of '0'/'1'
        for ch in code:
            if ch == '0':
                self.write_bit(0)
            elif ch == '1':
                self.write_bit(1)
            else:
                raise ValueError(f"invalid bit character {ch!r} in code {code!r}")

    def write_uint(self, value: int, width: int) -> None:
        if value < 0 or value >> width:
            raise ValueError(f"{value} does not fit in {width} bits")
        for i in range(width - 1, -1, -1):
            self.write_bit((value >> i) & 1)

    @property
    def pad_bits(self) -> int:
        return (-self.bit_length) % 8

    def finish(self) -> bytes:
        out = bytes(self.buf)
        if self.acc_bits:
            out += bytes([(self.acc << (8 - self.acc_bits)) & 0xFF])
        return out

    def to_bitstring(self) -> str:
        return ''.join(str(bit) for bit in BitReader(self.finish(), self.bit_length))

    def close(self, flush: bool = True) -> None:
        if self.closed:
            return
        self.closed = True
        if self.stream is not None:
            try:
                if flush:
                    self.stream.write(self.finish())
            finally:
                self.stream.close()


class BitReader:
    """
    Bit source over packed bytes, MSB-first
    bit_length hides the zero padding of the last byte, so has_next() turns
    False exactly where the writer stopped
    """

    def __init__(self, data: bytes, bit_length: Optional[int] = None) -> None:
        self.data = bytes(data)
        total = len(self.data) * 8
        if bit_length is None:
            bit_length = total
        elif bit_length < 0 or bit_length > total:
            raise ValueError(f"bit_length {bit_length} outside 0..{total}")
        self.bit_length = bit_length
        self.pos = 0

    @classmethod
    def from_bitstring(cls, bits: str) -> "BitReader":
        writer = BitWriter()
        writer.write_bits(bits)
        return cls(writer.finish(), writer.bit_length)

    @property
    def position(self) -> int:
        return self.pos

    @property
    def remaining(self) -> int:
        return self.bit_length - self.pos

    def has_next(self) -> bool:
        return self.pos < self.bit_length

    def read_bit(self) -> int:
        if self.pos >= self.bit_length:
            raise TruncatedStreamError(f"read past end of bitstream ({self.bit_length} bits)")
        byte = self.data[self.pos >> 3]
        bit = (byte >> (7 - (self.pos & 7))) & 1
        self.pos += 1
        return bit

    def read_uint(self, width: int) -> int:
        if width > self.remaining:
            raise TruncatedStreamError(f"need {width} bits, only {self.remaining} left")
        value = 0
        for _ in range(width):
            value = (value << 1) | self.read_bit()
        return value

    def __iter__(self) -> Iterator[int]:
        while self.has_next():
            yield self.read_bit()
