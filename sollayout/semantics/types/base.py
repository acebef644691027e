from typing import Optional, Tuple

# width of a storage slot, in bits
WORD_BITS = 256


class SolidityType:
    """
    Base class for solidity types.

    Attributes
    ----------
    _id : str
        The canonical name of the type.
    _bits : int
        Number of bits the value occupies in storage. Pointer-sized types
        (`bytes`, `string`, dynamic arrays) report a full word.
    _equality_attrs : Tuple, optional
        Attributes that determine equality (and hashing) of two instances.
    """

    _id: str
    _bits: int = WORD_BITS
    _equality_attrs: Optional[Tuple] = ()

    def _get_equality_attrs(self):
        return tuple(getattr(self, attr) for attr in self._equality_attrs)

    def __hash__(self):
        return hash((type(self), self._get_equality_attrs()))

    def __eq__(self, other):
        if self is other:
            return True
        return (
            type(self) is type(other) and self._get_equality_attrs() == other._get_equality_attrs()
        )

    @property
    def bits(self) -> int:
        return self._bits

    def __repr__(self):
        return self._id
