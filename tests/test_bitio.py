import pytest

from bitio import BitReader, BitWriter
from errors import TruncatedStreamError


def test_writer_packs_msb_first_and_zero_pads():
    w = BitWriter()
    w.write_bits("101")
    assert w.bit_length == 3
    assert w.pad_bits == 5
    assert w.finish() == bytes([0b10100000])


def test_writer_full_bytes_have_no_padding():
    w = BitWriter()
    w.write_bits("11110000" "00001111")
    assert w.pad_bits == 0
    assert w.finish() == b"\xf0\x0f"


def test_finish_can_be_called_twice():
    w = BitWriter()
    w.write_bit(1)
    assert w.finish() == w.finish() == b"\x80"
    w.write_bit(1)
    assert w.finish() == b"\xc0"


def test_write_uint():
    w = BitWriter()
    w.write_uint(5, 3)
    w.write_uint(0x61, 8)
    assert w.to_bitstring() == "101" "01100001"
    with pytest.raises(ValueError):
        w.write_uint(8, 3)
    with pytest.raises(ValueError):
        w.write_uint(-1, 3)


def test_write_rejects_non_bits():
    w = BitWriter()
    with pytest.raises(ValueError):
        w.write_bit(2)
    with pytest.raises(ValueError):
        w.write_bits("10x")


def test_writer_flushes_to_stream_on_close(tmp_path):
    path = tmp_path / "bits.bin"
    with BitWriter(path.open("wb")) as w:
        w.write_bits("11")
    assert w.closed
    assert w.stream.closed
    assert path.read_bytes() == b"\xc0"
    with pytest.raises(ValueError):
        w.write_bit(0)


def test_writer_does_not_flush_on_error(tmp_path):
    path = tmp_path / "bits.bin"
    with pytest.raises(RuntimeError):
        with BitWriter(path.open("wb")) as w:
            w.write_bits("1111")
            raise RuntimeError("boom")
    assert w.stream.closed
    assert path.read_bytes() == b""


def test_reader_stops_at_bit_length():
    r = BitReader(b"\xa0", bit_length=3)
    assert list(r) == [1, 0, 1]
    assert not r.has_next()
    with pytest.raises(TruncatedStreamError):
        r.read_bit()


def test_reader_defaults_to_every_bit():
    r = BitReader(b"\x01\x80")
    assert r.bit_length == 16
    assert r.read_uint(9) == 3
    assert r.position == 9
    assert r.remaining == 7


def test_reader_read_uint_past_end():
    r = BitReader(b"\xff", bit_length=4)
    with pytest.raises(TruncatedStreamError):
        r.read_uint(5)
    assert r.position == 0


def test_reader_rejects_bad_bit_length():
    with pytest.raises(ValueError):
        BitReader(b"\x00", bit_length=9)


def test_bitstring_helpers():
    bits = "0110100111"
    assert list(BitReader.from_bitstring(bits)) == [int(b) for b in bits]
    w = BitWriter()
    w.write_bits(bits)
    assert w.to_bitstring() == bits
    assert BitWriter().to_bitstring() == ""
