from .base import WORD_BITS, SolidityType
from .bytestrings import BytesT, StringT, _BytestringT
from .primitives import AddressT, BoolT, BytesM_T, IntegerT
from .subscriptable import DArrayT, SArrayT
from .utils import type_from_name


def _get_primitive_types():
    res: list[SolidityType] = [BoolT(), AddressT(), BytesT(), StringT()]

    res.extend(IntegerT.all())
    res.extend(BytesM_T.all())

    return {t._id: t for t in res}


# note: it might be good to make this a frozen dict of some sort
PRIMITIVE_TYPES = _get_primitive_types()
