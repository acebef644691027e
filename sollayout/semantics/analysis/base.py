from dataclasses import dataclass
from typing import NamedTuple, Optional

from sollayout.exceptions import LayoutPanic
from sollayout.semantics.types.base import WORD_BITS

# storage is word-addressable, slots live in [0, 2**256)
MAX_SLOT = 2**256


@dataclass
class StorageCursor:
    """
    Position of the next free storage bit: a slot number and the bit offset
    inside that slot. Shared by sibling declarations at the same level and
    advanced in place as they are placed.
    """

    slot: int = 0
    offset: int = 0

    def fits(self, bits: int) -> bool:
        return self.offset + bits <= WORD_BITS

    def next_slot(self) -> None:
        self.slot += 1
        self.offset = 0

    def align(self) -> None:
        # move to an untouched slot, unless the current one is still empty
        if self.offset > 0:
            self.next_slot()

    def copy(self) -> "StorageCursor":
        return StorageCursor(self.slot, self.offset)

    def restore(self, other: "StorageCursor") -> None:
        self.slot = other.slot
        self.offset = other.offset


class SlotAnchor(NamedTuple):
    """
    Base of the symbolic slot formula for entries placed relative to some
    runtime-derived location (a mapping value or dynamic array contents).
    `expr` is `None` for absolute placement at contract level.
    """

    expr: Optional[str]
    origin: int = 0

    def render(self, slot: int) -> str:
        if self.expr is None:
            return str(slot)
        delta = slot - self.origin
        if delta < 0:
            raise LayoutPanic(f"slot {slot} lies before its anchor {self.origin}")
        if delta == 0:
            return self.expr
        return f"{self.expr} + {delta}"


ABSOLUTE = SlotAnchor(None)


@dataclass(frozen=True)
class KeyInfo:
    """
    Placeholder for the key of a mapping. The slot a key maps to depends on
    the key value, so `slot` and `offset` are always 0 and `size` is the
    nominal word size the key is padded to before hashing.
    """

    type_tag: str
    symbolic_path: str
    structural_path: str
    offset: int = 0
    slot: int = 0
    size: int = WORD_BITS


@dataclass(frozen=True)
class LayoutEntry:
    """
    Resolved placement of a variable or of a synthetic child
    (`value`, `element`, `element_N`).

    Attributes
    ----------
    name : str, optional
        Declared identifier, `None` for synthetic children.
    type_tag : str
        `mapping`, `array`, or the canonical elementary type name.
    offset : int
        Offset in bits within the slot.
    slot : int
        Slot number. Relative to the derived location for mapping values.
    size : int
        Size in bits.
    symbolic_path : str
        Formula for the concrete slot, e.g. `keccak256(key . 2)`.
    structural_path : str
        Dotted path in the declaration tree, e.g. `balances.value.key`.
    key : KeyInfo, optional
        Only for mappings.
    children : dict, optional
        Only for mappings and arrays, in insertion order.
    length : int, optional
        Only for fixed size arrays.
    """

    name: Optional[str]
    type_tag: str
    offset: int
    slot: int
    size: int
    symbolic_path: str
    structural_path: str
    key: Optional[KeyInfo] = None
    children: Optional[dict[str, "LayoutEntry"]] = None
    length: Optional[int] = None

    @property
    def is_mapping(self) -> bool:
        return self.type_tag == "mapping"

    @property
    def is_array(self) -> bool:
        return self.type_tag == "array"
