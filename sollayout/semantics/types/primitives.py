# value types which fit within one storage slot, like ints and addresses

from typing import Tuple

from .base import SolidityType

RANGE_1_32 = list(range(1, 33))


class _PrimT(SolidityType):
    """Value types which are packed next to each other in a slot."""


class BoolT(_PrimT):
    _id = "bool"
    _bits = 8


class AddressT(_PrimT):
    _id = "address"
    _bits = 160


# one-word bytesM with m possible bytes set, e.g. bytes1..bytes32
class BytesM_T(_PrimT):

    _equality_attrs = ("m",)

    def __init__(self, m: int):
        self.m: int = m

    @property
    def _id(self):
        return f"bytes{self.m}"

    @property
    def bits(self) -> int:
        return self.m * 8

    @classmethod
    def all(cls) -> Tuple["BytesM_T", ...]:
        return tuple(cls(m) for m in RANGE_1_32)


class IntegerT(_PrimT):
    """
    General integer type. All signed and unsigned ints from uint8 thru int256

    Attributes
    ----------
    is_signed : bool
        Is the value signed?
    bits : int
        Number of bits the value occupies in storage
    """


    _equality_attrs = ("is_signed", "bits")

    def __init__(self, is_signed: bool, bits: int):
        self.is_signed = is_signed
        self._bits = bits

    @property
    def _id(self):
        u = "" if self.is_signed else "u"
        return f"{u}int{self.bits}"

    @classmethod
    def signeds(cls) -> Tuple["IntegerT", ...]:
        return tuple(cls(is_signed=True, bits=i * 8) for i in RANGE_1_32)

    @classmethod
    def unsigneds(cls) -> Tuple["IntegerT", ...]:
        return tuple(cls(is_signed=False, bits=i * 8) for i in RANGE_1_32)

    @classmethod
    def all(cls) -> Tuple["IntegerT", ...]:
        return cls.signeds() + cls.unsigneds()
