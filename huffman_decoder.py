# filename: huffman_decoder.py

import logging
from typing import Iterable, Iterator, Optional

from bitarray import bitarray

from huffman_core import HuffmanNode, TruncatedStream, require_root

log = logging.getLogger(__name__)


class BitReader:
    """Sequential bit source over a big-endian ``bitarray``."""

    def __init__(self, bits: bitarray):
        self.bits = bits
        self.position = 0

    @classmethod
    def from_bytes(cls, data: bytes, bit_length: Optional[int] = None) -> "BitReader":
        """Read packed bytes, optionally keeping only the first ``bit_length`` bits.

        The encoder pads its last byte with zeros; ``bit_length`` drops that
        padding so it is not decoded as extra symbols.
        """
        bits = bitarray(endian="big")
        bits.frombytes(bytes(data))
        if bit_length is not None:
            if bit_length < 0 or bit_length > len(bits):
                raise ValueError(f"bit_length {bit_length} outside 0..{len(bits)}")
            del bits[bit_length:]
        return cls(bits)

    @classmethod
    def from_text(cls, text: str) -> "BitReader":
        digits = "".join(text.split())
        if set(digits) - {"0", "1"}:
            raise ValueError("bit text may contain only '0', '1' and whitespace")
        return cls(bitarray(digits, endian="big"))

    def has_next_bit(self) -> bool:
        return self.position < len(self.bits)

    def next_bit(self) -> int:
        if not self.has_next_bit():
            raise EOFError("no more bits")
        bit = self.bits[self.position]
        self.position += 1
        return bit

    def __len__(self):
        return len(self.bits) - self.position

    def __iter__(self) -> Iterator[int]:
        while self.has_next_bit():
            yield self.next_bit()


def _check_bit(bit) -> int:
    if bit not in (0, 1):
        raise ValueError(f"bit must be 0 or 1, got {bit!r}")
    return bit


def translate(root: Optional[HuffmanNode], bits: Iterable[int]) -> Iterator[int]:
    """Lazily decode ``bits`` with the code rooted at ``root``.

    Each symbol is yielded as soon as its last bit has been read. If the bits
    run out partway down a code, :class:`TruncatedStream` is raised and the
    partial code is discarded.

    A single-leaf tree has a zero-length code; every bit read then stands for
    one occurrence of its symbol, whatever the bit's value.
    """
    return _translate(require_root(root), bits)


def _translate(root: HuffmanNode, bits: Iterable[int]) -> Iterator[int]:
    decoded = 0

    if root.is_leaf:
        for bit in bits:
            _check_bit(bit)
            decoded += 1
            yield root.symbol
        log.debug("decoded %d symbols with a single-symbol code", decoded)
        return

    node = root
    depth = 0
    for bit in bits:
        node = node.one if _check_bit(bit) else node.zero
        depth += 1
        if node.is_leaf:
            decoded += 1
            yield node.symbol
            node = root
            depth = 0

    if depth:
        raise TruncatedStream(f"bit source ended {depth} bit(s) into a code after {decoded} symbol(s)")
    log.debug("decoded %d symbols", decoded)
