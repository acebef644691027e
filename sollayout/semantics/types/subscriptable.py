from sollayout.exceptions import UnrecognizedType

from .base import WORD_BITS, SolidityType


class _SequenceT(SolidityType):
    """
    Private base class for array types spelled out in a type string,
    e.g. `uint8[4]` or `address[]`.

    Attributes
    ----------
    value_type : SolidityType
        Type of the elements of the array.
    """

    def __init__(self, value_type: SolidityType):
        self.value_type = value_type


class SArrayT(_SequenceT):
    """
    Static array type
    """

    _equality_attrs = ("value_type", "length")

    def __init__(self, value_type: SolidityType, length: int) -> None:
        if not 0 < length < 2**256:
            raise UnrecognizedType(f"Array length is invalid: {length}")
        super().__init__(value_type)
        self.length = length

    @property
    def _id(self):
        return f"{self.value_type}[{self.length}]"

    @property
    def bits(self) -> int:
        return self.value_type.bits * self.length


class DArrayT(_SequenceT):
    """
    Dynamic array type
    """

    _equality_attrs = ("value_type",)

    @property
    def _id(self):
        return f"{self.value_type}[]"

    @property
    def bits(self) -> int:
        # only the length lives in the declared slot
        return WORD_BITS
