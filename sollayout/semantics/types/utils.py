import re

from sollayout.exceptions import UnrecognizedType

from .base import SolidityType
from .bytestrings import BytesT, StringT
from .primitives import AddressT, BoolT, BytesM_T, IntegerT
from .subscriptable import DArrayT, SArrayT

_INTEGER_RE = re.compile(r"(u?)int(\d*)")
_BYTES_M_RE = re.compile(r"bytes(\d+)")
_ARRAY_RE = re.compile(r"(.+)\[(\d*)\]")

# names kept around by older compilers
_TYPE_ALIASES = {"byte": "bytes1", "address payable": "address"}


def type_from_name(type_name: str, allow_arrays: bool = False) -> SolidityType:
    """
    Return a type object for the given elementary type name.

    Arguments
    ---------
    type_name: str
        Name of an elementary type as found in the AST, e.g. `uint128`,
        `address` or `bytes32`.
    allow_arrays: bool, optional
        If `True`, also recognize a trailing `[N]` or `[]` suffix and
        classify the base type recursively. Arrays which come from the AST
        are `ArrayTypeName` nodes and must not be classified this way.

    Returns
    -------
    SolidityType
        Type definition object.
    """
    name = type_name.strip()

    if allow_arrays:
        m = _ARRAY_RE.fullmatch(name)
        if m is not None:
            base_name, length_str = m.groups()
            try:
                value_type = type_from_name(base_name, allow_arrays=True)
            except UnrecognizedType:
                raise UnrecognizedType(f"Unknown Solidity type: {type_name}") from None
            if length_str == "":
                return DArrayT(value_type)
            return SArrayT(value_type, int(length_str))

    name = _TYPE_ALIASES.get(name, name)

    if name == "address":
        return AddressT()
    if name == "bool":
        return BoolT()
    if name == "bytes":
        return BytesT()
    if name == "string":
        return StringT()

    m = _INTEGER_RE.fullmatch(name)
    if m is not None:
        unsigned, bits_str = m.groups()
        bits = int(bits_str) if bits_str else 256
        if bits % 8 != 0 or not 8 <= bits <= 256:
            raise UnrecognizedType(f"Invalid integer width: {type_name}")
        return IntegerT(is_signed=not unsigned, bits=bits)

    m = _BYTES_M_RE.fullmatch(name)
    if m is not None:
        n_bytes = int(m.group(1))
        if not 1 <= n_bytes <= 32:
            raise UnrecognizedType(f"Invalid fixed bytes width: {type_name}")
        return BytesM_T(n_bytes)

    raise UnrecognizedType(f"Unknown Solidity type: {type_name}", hint=_suggest_hint(name))


def _suggest_hint(name: str):
    if "[" in name:
        return "array types should be ArrayTypeName nodes, or classified with allow_arrays=True"
    if name.startswith("fixed") or name.startswith("ufixed"):
        return "fixed point types are not supported"
    return None
