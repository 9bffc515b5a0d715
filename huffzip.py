"""
Command-line front end for the Huffman container

How to run:
  huffzip compress notes.txt notes.huf
  huffzip decompress notes.huf notes_copy.txt
  huffzip codes notes.txt --tree
  huffzip roundtrip inputs/WarAndPeace.txt --outdir results
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import container
from errors import HuffmanError
from huffman import build_huffman_tree, count_frequencies, format_tree, generate_huffman_codes


def symbol_label(symbol: int) -> str:
    ch = chr(symbol)
    if ch.isprintable() and not ch.isspace():
        return repr(ch)
    return f"0x{symbol:02x}"


def cmd_compress(args) -> int:
    stats = container.compress_file(args.input, args.output)
    print(f"{args.input}: {stats.input_bytes} -> {stats.output_bytes} bytes "
          f"(ratio {stats.compression_ratio:.3f}, {stats.unique_symbols} symbols)")
    return 0


def cmd_decompress(args) -> int:
    size = container.decompress_file(args.input, args.output)
    print(f"{args.output}: {size} bytes restored")
    return 0


def cmd_codes(args) -> int:
    data = Path(args.input).read_bytes()
    frequencies, symbols = count_frequencies(data)
    root = build_huffman_tree(frequencies, symbols)
    codes = generate_huffman_codes(root)

    if args.tree:
        print(format_tree(root))
        print()

    # most frequent first, sorted() is stable so first appearance breaks ties
    order = sorted(symbols, key=lambda s: -frequencies[s])
    print(f"{'symbol':>8} {'count':>10}  code")
    for symbol in order:
        print(f"{symbol_label(symbol):>8} {frequencies[symbol]:>10}  {codes[symbol]}")
    return 0


def cmd_roundtrip(args) -> int:
    src = Path(args.input)
    outdir = Path(args.outdir) if args.outdir else src.parent
    outdir.mkdir(parents=True, exist_ok=True)
    compressed = outdir / f"{src.stem}_compressed.huf"
    decompressed = outdir / f"{src.stem}_decompressed{src.suffix}"

    stats = container.compress_file(src, compressed)
    container.decompress_file(compressed, decompressed)
    ok = decompressed.read_bytes() == src.read_bytes()

    print(f"original:     {stats.input_bytes} bytes")
    print(f"compressed:   {stats.output_bytes} bytes ({compressed})")
    print(f"tree / codes: {stats.tree_bits} / {stats.payload_bits} bits, {stats.pad_bits} pad bits")
    print(f"ratio:        {stats.compression_ratio:.3f}")
    print(f"roundtrip:    {'OK' if ok else 'MISMATCH'} ({decompressed})")
    return 0 if ok else 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffzip", description="Static Huffman compression of a single file")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compress", help="Compress INPUT into OUTPUT")
    p.add_argument("input")
    p.add_argument("output")
    p.set_defaults(func=cmd_compress)

    p = sub.add_parser("decompress", help="Restore INPUT (a .huf file) into OUTPUT")
    p.add_argument("input")
    p.add_argument("output")
    p.set_defaults(func=cmd_decompress)

    p = sub.add_parser("codes", help="Print the code table built for INPUT")
    p.add_argument("input")
    p.add_argument("--tree", action="store_true", help="Also print the code tree")
    p.set_defaults(func=cmd_codes)

    p = sub.add_parser("roundtrip", help="Compress then decompress INPUT and verify the copy")
    p.add_argument("input")
    p.add_argument("--outdir", type=str, default=None, help="Where to write the two output files (default: next to INPUT)")
    p.set_defaults(func=cmd_roundtrip)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except OSError as exc:
        print(f"huffzip: {exc}", file=sys.stderr)
        return 1
    except HuffmanError as exc:
        print(f"huffzip: {args.input}: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
