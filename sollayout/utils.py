import contextlib
import logging
import time
from typing import Generic, TypeVar

from Crypto.Hash import keccak  # type: ignore

_T = TypeVar("_T")
_K = TypeVar("_K")

logger = logging.getLogger(__name__)


def keccak256(x: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=x).digest()


class InsertableOnceDict(Generic[_T, _K], dict[_T, _K]):
    def __setitem__(self, k, v):
        if k in self:
            raise ValueError(f"{k} is already in dict!")
        super().__setitem__(k, v)


def bytes_to_int(bytez):
    o = 0
    for b in bytez:
        o = o * 256 + b
    return o


# Converts an integer to a full EVM word
def int_to_bytes32(n: int) -> bytes:
    assert 0 <= n < 2**256
    return n.to_bytes(32, byteorder="big")


def keccak256_slot(slot: int) -> int:
    """
    Return the slot at which the contents of a dynamic array whose length
    is stored at `slot` begin, i.e. keccak256 of the 32-byte big-endian slot.
    """
    return bytes_to_int(keccak256(int_to_bytes32(slot)))


def indent(text: str, prefix: str = "  ", level: int = 1) -> str:
    """
    Prefix every line of `text` with `prefix`, repeated `level` times. Used to
    nest child entries under their parent in the text outputs.
    """
    return "".join(prefix * level + line for line in text.splitlines(keepends=True))


@contextlib.contextmanager
def timeit(msg):
    start_time = time.perf_counter()
    yield
    end_time = time.perf_counter()
    total_time = end_time - start_time
    logger.debug("%s: Took %.4f seconds", msg, total_time)
