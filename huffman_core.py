# filename: huffman_core.py

import heapq
import itertools
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

log = logging.getLogger(__name__)

Frequencies = Union[Mapping, Sequence[int]]


class HuffmanError(Exception):
    """Base class for every failure raised by the Huffman engine."""


class EmptyAlphabet(HuffmanError, ValueError):
    """There is no symbol to build a code from, or no tree to work on."""


class InvalidFrequencyTable(HuffmanError, ValueError):
    pass


class MalformedCodeTable(HuffmanError, ValueError):
    """A persisted code table violates the two-lines-per-leaf format."""


class InvalidPathCharacter(MalformedCodeTable):
    pass


class CodeTableConflict(MalformedCodeTable):
    """Two entries share a path or a symbol, or one path is a prefix of another."""


class TruncatedStream(HuffmanError, EOFError):
    """The bit source ran out in the middle of a code."""


@dataclass(frozen=True, eq=False)
class HuffmanNode:
    weight: int = 0
    symbol: Optional[int] = None
    zero: Optional["HuffmanNode"] = None
    one: Optional["HuffmanNode"] = None

    def __post_init__(self):
        if (self.zero is None) != (self.one is None):
            raise ValueError("a Huffman node has either two children or none")
        if self.zero is None and self.symbol is None:
            raise ValueError("a leaf node must carry a symbol")

    @property
    def is_leaf(self) -> bool:
        return self.zero is None


def require_root(root: Optional[HuffmanNode]) -> HuffmanNode:
    if root is None:
        raise EmptyAlphabet("no Huffman tree: the alphabet is empty")
    return root


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_frequencies(frequencies: Frequencies) -> List[Tuple[int, int]]:
    """Return ``(symbol, weight)`` pairs in ascending symbol order.

    ``frequencies`` is either a mapping of symbol to weight or a sequence whose
    index is the symbol. Zero weights are kept here; ``build_tree`` drops them.
    """
    if isinstance(frequencies, Mapping):
        items = list(frequencies.items())
    else:
        items = list(enumerate(frequencies))

    for symbol, weight in items:
        if not _is_int(symbol) or symbol < 0:
            raise InvalidFrequencyTable(f"symbol must be a non-negative integer, got {symbol!r}")
        if not _is_int(weight) or weight < 0:
            raise InvalidFrequencyTable(f"weight of symbol {symbol} must be a non-negative integer, got {weight!r}")
    return sorted(items)


class HuffmanLogic:
    def build_tree(self, frequencies: Frequencies) -> HuffmanNode:
        """Build the Huffman tree for ``frequencies`` by repeated minimum-merge.

        Equal weights leave the heap in insertion order: leaves are pushed in
        ascending symbol order and every merged node gets the next sequence
        number, so the same table always yields the same tree.
        """
        sequence = itertools.count()
        priority_queue = [
            (weight, next(sequence), HuffmanNode(weight, symbol))
            for symbol, weight in normalize_frequencies(frequencies)
            if weight
        ]
        if not priority_queue:
            raise EmptyAlphabet("cannot build a Huffman code without a nonzero frequency")
        heapq.heapify(priority_queue)
        leaves = len(priority_queue)

        # Iteratively merge the two lightest nodes until only the root is left
        while len(priority_queue) > 1:
            _, _, zero = heapq.heappop(priority_queue)
            _, _, one = heapq.heappop(priority_queue)
            merged = HuffmanNode(zero.weight + one.weight, zero=zero, one=one)
            log.debug("merge %d + %d -> %d", zero.weight, one.weight, merged.weight)
            heapq.heappush(priority_queue, (merged.weight, next(sequence), merged))

        root = priority_queue[0][2]
        log.info("built Huffman code for %d symbols, total weight %d", leaves, root.weight)
        return root

    def generate_codes(self, node: Optional[HuffmanNode]) -> Dict[int, str]:
        codes: Dict[int, str] = {}
        stack = [(require_root(node), "")]
        while stack:
            node, current_code = stack.pop()
            if node.is_leaf:
                codes[node.symbol] = current_code
            else:
                stack.append((node.zero, current_code + "0"))
                stack.append((node.one, current_code + "1"))
        return codes
