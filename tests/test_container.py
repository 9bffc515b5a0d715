import random

import pytest

import container
from errors import CorruptStreamError, HuffmanError, TruncatedStreamError


def test_empty_input_is_header_only():
    blob = container.compress(b"")
    assert blob == container.MAGIC + bytes(8)
    assert container.decompress(blob) == b""


@pytest.mark.parametrize("data", [
    b"a",
    b"aaaa",
    b"abracadabra",
    bytes(range(256)) * 3,
    bytes(random.Random(0).randrange(256) for _ in range(5000)),
    b"\x00" * 1000 + b"\x01",
])
def test_compress_decompress(data):
    assert container.decompress(container.compress(data)) == data


def test_header_carries_symbol_count():
    blob = container.compress(b"abracadabra")
    assert container.read_header(blob) == 11


def test_skewed_input_shrinks():
    data = b"A" * 10000 + b"BC"
    assert len(container.compress(data)) < len(data) // 4


def test_analyze_abracadabra():
    stats = container.analyze(b"abracadabra")
    assert stats.input_bytes == 11
    assert stats.unique_symbols == 5
    assert stats.tree_bits == 49
    assert stats.payload_bits == 23
    assert stats.pad_bits == 0
    assert stats.output_bytes == container.HEADER_SIZE + 9
    assert stats.compression_ratio == pytest.approx(21 / 11)
    assert stats.bits_per_symbol == pytest.approx(23 / 11)


def test_bad_magic_is_corrupt():
    blob = container.compress(b"hello")
    with pytest.raises(CorruptStreamError):
        container.decompress(b"ZIP!" + blob[4:])
    with pytest.raises(CorruptStreamError):
        container.decompress(b"")


def test_short_header_is_truncated():
    with pytest.raises(TruncatedStreamError):
        container.decompress(container.MAGIC + b"\x00\x00")


def test_missing_payload_is_truncated():
    blob = container.compress(b"abracadabra")
    with pytest.raises(TruncatedStreamError):
        container.decompress(blob[:-1])


def test_missing_tree_is_truncated():
    blob = container.compress(b"abracadabra")
    with pytest.raises(TruncatedStreamError):
        container.decompress(blob[:container.HEADER_SIZE])


def test_trailing_bytes_are_corrupt():
    with pytest.raises(CorruptStreamError):
        container.decompress(container.compress(b"abracadabra") + b"\x00")
    with pytest.raises(CorruptStreamError):
        container.decompress(container.compress(b"") + b"\x00")


def test_files_roundtrip(tmp_path):
    src = tmp_path / "input.txt"
    packed = tmp_path / "input.huf"
    out = tmp_path / "output.txt"
    src.write_bytes(b"It was the best of times, it was the worst of times.\r\n" * 20)

    stats = container.compress_file(src, packed)
    assert stats.output_bytes == packed.stat().st_size
    assert stats.output_bytes < stats.input_bytes

    assert container.decompress_file(packed, out) == src.stat().st_size
    assert out.read_bytes() == src.read_bytes()


def test_missing_source_propagates_and_writes_nothing(tmp_path):
    dst = tmp_path / "out.huf"
    with pytest.raises(FileNotFoundError):
        container.compress_file(tmp_path / "nope.txt", dst)
    assert not dst.exists()


def test_corrupt_file_leaves_no_output(tmp_path):
    src = tmp_path / "bad.huf"
    dst = tmp_path / "bad.out"
    src.write_bytes(b"not a huffman file")
    with pytest.raises(HuffmanError):
        container.decompress_file(src, dst)
    assert not dst.exists()
