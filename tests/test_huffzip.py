import pytest

import huffzip


@pytest.fixture
def sample(tmp_path):
    path = tmp_path / "sample.txt"
    path.write_bytes(b"abracadabra\n")
    return path


def test_compress_then_decompress(tmp_path, sample, capsys):
    packed = tmp_path / "sample.huf"
    out = tmp_path / "copy.txt"
    assert huffzip.main(["compress", str(sample), str(packed)]) == 0
    assert huffzip.main(["decompress", str(packed), str(out)]) == 0
    assert out.read_bytes() == sample.read_bytes()
    printed = capsys.readouterr().out
    assert "12 ->" in printed
    assert "12 bytes restored" in printed


def test_codes_lists_most_frequent_first(sample, capsys):
    assert huffzip.main(["codes", str(sample), "--tree"]) == 0
    lines = capsys.readouterr().out.splitlines()
    table = lines[lines.index(next(l for l in lines if l.strip().startswith("symbol"))) + 1:]
    assert table[0].split()[:2] == ["'a'", "5"]
    assert any(line.split()[0] == "0x0a" for line in table)


def test_roundtrip_writes_both_files(tmp_path, sample, capsys):
    outdir = tmp_path / "results"
    assert huffzip.main(["roundtrip", str(sample), "--outdir", str(outdir)]) == 0
    assert (outdir / "sample_compressed.huf").exists()
    assert (outdir / "sample_decompressed.txt").read_bytes() == sample.read_bytes()
    assert "roundtrip:    OK" in capsys.readouterr().out


def test_missing_input_exit_code(tmp_path, capsys):
    assert huffzip.main(["compress", str(tmp_path / "missing"), str(tmp_path / "x.huf")]) == 1
    assert "huffzip:" in capsys.readouterr().err


def test_corrupt_input_exit_code(tmp_path, capsys):
    bad = tmp_path / "bad.huf"
    bad.write_bytes(b"HUF1\x00\x00\x00\x00\x00\x00\x00\x05")
    assert huffzip.main(["decompress", str(bad), str(tmp_path / "out")]) == 2
    err = capsys.readouterr().err
    assert str(bad) in err


def test_command_is_required():
    with pytest.raises(SystemExit) as exc:
        huffzip.main([])
    assert exc.value.code == 2


def test_symbol_label():
    assert huffzip.symbol_label(ord('a')) == "'a'"
    assert huffzip.symbol_label(ord(' ')) == "0x20"
    assert huffzip.symbol_label(0) == "0x00"
