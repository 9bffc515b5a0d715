import heapq
import itertools
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from bitio import BitReader, BitWriter
from errors import CorruptStreamError, HuffmanError, SymbolLookupError, TruncatedStreamError

__all__ = [
    "HuffmanNode", "HuffmanError", "SymbolLookupError", "TruncatedStreamError", "CorruptStreamError",
    "count_frequencies", "build_huffman_tree", "generate_huffman_codes",
    "huffman_encode", "huffman_decode", "encode_bits", "decode_bits",
    "write_tree", "read_tree", "format_tree", "SYMBOL_BITS",
]

SYMBOL_BITS = 8 # width of a serialised leaf symbol, trees are only persisted for byte alphabets


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, frequency, left=None, right=None):
        self.symbol = symbol    # byte (or any hashable) for leaves, None for internal nodes
        self.frequency = frequency
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode({self.symbol!r}, {self.frequency})"
        return f"HuffmanNode(*, {self.frequency})"


def count_frequencies(data: Iterable) -> Tuple[Dict[Hashable, int], List[Hashable]]:
    """
    Count each distinct symbol of data
    Returns (frequencies, symbols) where symbols lists the distinct symbols in
    order of first appearance; that order seeds the tree builder's tie-break
    """
    frequencies: Dict[Hashable, int] = {}
    symbols: List[Hashable] = []
    for symbol in data:
        if symbol in frequencies:
            frequencies[symbol] += 1
        else:
            frequencies[symbol] = 1
            symbols.append(symbol)
    return frequencies, symbols


def build_huffman_tree(frequency_table: Dict[Hashable, int],
                       symbols: Optional[List[Hashable]] = None) -> Optional[HuffmanNode]:
    """
    Build the Huffman tree for frequency_table (symbol -> count)

    Queue entries are (frequency, sequence, node) where sequence increases with
    every push, so equal frequencies leave the queue in insertion order (FIFO):
    leaves in `symbols` order first, then merged nodes in the order they were made.
    The first node popped of each pair becomes the left child.

    Returns None for an empty table. A single symbol is wrapped in an internal
    root as its only (left) child so its code is "0" rather than empty.
    """
    if not frequency_table:
        return None

    if symbols is None:
        symbols = list(frequency_table)
    elif len(symbols) != len(frequency_table) or set(symbols) != set(frequency_table):
        raise ValueError("symbols must list every key of frequency_table exactly once")

    sequence = itertools.count()
    priority_queue = []
    for symbol in symbols:
        frequency = frequency_table[symbol]
        if frequency <= 0:
            raise ValueError(f"frequency of {symbol!r} must be positive, got {frequency}")
        priority_queue.append((frequency, next(sequence), HuffmanNode(symbol, frequency)))
    heapq.heapify(priority_queue)

    if len(priority_queue) == 1:
        _, _, only = priority_queue[0]
        return HuffmanNode(None, only.frequency, left=only)

    while len(priority_queue) > 1:
        left_freq, _, left = heapq.heappop(priority_queue)
        right_freq, _, right = heapq.heappop(priority_queue)
        merged = HuffmanNode(None, left_freq + right_freq, left, right) # internal node with combined frequency
        heapq.heappush(priority_queue, (merged.frequency, next(sequence), merged))

    return priority_queue[0][2] # root of the tree


def generate_huffman_codes(root: Optional[HuffmanNode]) -> Dict[Hashable, str]:
    """Map every leaf symbol to its path from root ('0' = left, '1' = right)."""
    codes: Dict[Hashable, str] = {}
    if root is None:
        return codes

    # explicit stack, skewed trees can be as deep as the alphabet is large
    stack = [(root, '')]
    while stack:
        node, path = stack.pop()
        if node.is_leaf():
            if not path:
                raise ValueError("root is a bare leaf, its code would be empty")
            codes[node.symbol] = path
            continue
        if node.right is not None:
            stack.append((node.right, path + '1'))
        if node.left is not None:
            stack.append((node.left, path + '0'))
    return codes


def huffman_encode(data: Iterable, code_map: Dict[Hashable, str],
                   writer: Optional[BitWriter] = None) -> BitWriter:
    """Append the code of every symbol of data to writer (a new BitWriter if None)."""
    if writer is None:
        writer = BitWriter()
    for symbol in data:
        try:
            code = code_map[symbol]
        except KeyError:
            raise SymbolLookupError(symbol) from None
        writer.write_bits(code)
    return writer


def encode_bits(data: Iterable, code_map: Dict[Hashable, str]) -> str:
    return huffman_encode(data, code_map).to_bitstring()


def huffman_decode(reader: BitReader, root: Optional[HuffmanNode], count: Optional[int] = None) -> list:
    """
    Walk the tree bit by bit and emit a symbol at every leaf

    count None: decode until reader is exhausted, which must happen at a codeword
    boundary. count given: stop after exactly count symbols, any bits left over
    are padding and stay unread.
    """
    if count is not None and count < 0:
        raise ValueError(f"count must be >= 0, got {count}")

    decoded = []
    if root is None: # empty input has no tree and no bits
        if reader.has_next() or count:
            raise CorruptStreamError("bitstream is not empty but there is no Huffman tree")
        return decoded

    current_node = root
    while count is None or len(decoded) < count:
        if not reader.has_next():
            if current_node is root and count is None:
                break
            if current_node is root:
                raise TruncatedStreamError(f"bitstream ended after {len(decoded)} of {count} symbols")
            raise TruncatedStreamError(f"bitstream ended inside a codeword after {len(decoded)} symbols")

        bit = reader.read_bit()
        next_node = current_node.right if bit else current_node.left
        if next_node is None: # e.g. a 1 bit under the single-symbol root
            raise CorruptStreamError(f"bit {bit} at position {reader.position - 1} leads to a missing child")

        if next_node.is_leaf():
            decoded.append(next_node.symbol)
            current_node = root # reset to the root for the next symbol
        else:
            current_node = next_node

    return decoded


def decode_bits(bits: str, root: Optional[HuffmanNode]) -> list:
    return huffman_decode(BitReader.from_bitstring(bits), root)


def write_tree(root: HuffmanNode, writer: BitWriter) -> None:
    """
    Preorder: leaf = 1 + SYMBOL_BITS-bit symbol, internal = 0 + left + right
    The single-symbol root is written as its lone leaf, read_tree wraps it again.
    Frequencies are not persisted.
    """
    if root is None:
        raise ValueError("cannot serialise an empty tree")
    if root.right is None and root.left is not None and root.left.is_leaf():
        root = root.left

    def write_node(node):
        if node.is_leaf():
            symbol = node.symbol
            if not isinstance(symbol, int) or not 0 <= symbol < (1 << SYMBOL_BITS):
                raise ValueError(f"only byte symbols can be serialised, got {symbol!r}")
            writer.write_bit(1)
            writer.write_uint(symbol, SYMBOL_BITS)
            return
        if node.left is None or node.right is None:
            raise ValueError("internal node below the root is missing a child")
        writer.write_bit(0)
        write_node(node.left)
        write_node(node.right)

    write_node(root)


def read_tree(reader: BitReader) -> HuffmanNode:
    seen = set()
    max_depth = 1 << SYMBOL_BITS # a full byte alphabet is never deeper than this

    def read_node(depth):
        if depth > max_depth:
            raise CorruptStreamError("serialised tree is deeper than any byte alphabet allows")
        if reader.read_bit():
            symbol = reader.read_uint(SYMBOL_BITS)
            if symbol in seen:
                raise CorruptStreamError(f"symbol {symbol} appears twice in serialised tree")
            seen.add(symbol)
            return HuffmanNode(symbol, 0)
        left = read_node(depth + 1)
        right = read_node(depth + 1)
        return HuffmanNode(None, 0, left, right)

    root = read_node(0)
    if root.is_leaf():
        return HuffmanNode(None, 0, left=root)
    return root


def format_tree(root: Optional[HuffmanNode]) -> str:
    if root is None:
        return "(empty)"
    lines = []
    stack = [(root, 0, '')]
    while stack:
        node, depth, edge = stack.pop()
        label = repr(node.symbol) if node.is_leaf() else '*'
        lines.append(f"{'  ' * depth}{edge}{label} ({node.frequency})")
        if node.right is not None:
            stack.append((node.right, depth + 1, '1: '))
        if node.left is not None:
            stack.append((node.left, depth + 1, '0: '))
    return '\n'.join(lines)
