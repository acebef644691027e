from .base import SolidityType


class _BytestringT(SolidityType):
    """
    Private base class for dynamically sized byte sequences.

    In storage only the slot holding the length (and, for short values, the
    data itself) is placed in the layout, so these are pointer sized.
    """


class BytesT(_BytestringT):
    _id = "bytes"


class StringT(_BytestringT):
    _id = "string"
