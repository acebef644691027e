import dataclasses
import logging
from typing import Iterable, Optional

from sollayout.ast import nodes as sol_ast
from sollayout.exceptions import (
    ExceptionList,
    StorageLayoutException,
    UnrecognizedType,
    UnsupportedTypeName,
)
from sollayout.semantics.analysis.base import (
    ABSOLUTE,
    MAX_SLOT,
    KeyInfo,
    LayoutEntry,
    SlotAnchor,
    StorageCursor,
)
from sollayout.semantics.types import WORD_BITS, type_from_name
from sollayout.utils import InsertableOnceDict, keccak256_slot

logger = logging.getLogger(__name__)

# a declaration to lay out: (name, type name node)
Declaration = tuple[str, Optional[sol_ast.TypeName]]


def resolve(
    name: Optional[str],
    type_node: sol_ast.TypeName,
    cursor: StorageCursor,
    path: Optional[str] = None,
) -> LayoutEntry:
    """
    Place a declaration in storage and return its layout entry.

    Arguments
    ---------
    name : str, optional
        Declared identifier.
    type_node : TypeName
        `ElementaryTypeName`, `Mapping` or `ArrayTypeName` node.
    cursor : StorageCursor
        Next free position. Advanced in place past the declaration so that
        the next sibling continues from there.
    path : str, optional
        Structural path of the declaration, defaults to `name`.

    Returns
    -------
    LayoutEntry
        The placement of the declaration and, recursively, its children.
    """
    if path is None:
        path = name or ""
    return _resolve_r(name, type_node, cursor, path, ABSOLUTE)


def _resolve_r(
    name: Optional[str],
    type_node: sol_ast.TypeName,
    cursor: StorageCursor,
    path: str,
    anchor: SlotAnchor,
) -> LayoutEntry:
    if isinstance(type_node, sol_ast.ElementaryTypeName):
        return _resolve_elementary(name, type_node, cursor, path, anchor)
    if isinstance(type_node, sol_ast.Mapping):
        return _resolve_mapping(name, type_node, cursor, path, anchor)
    if isinstance(type_node, sol_ast.ArrayTypeName):
        if type_node.is_dynamic:
            return _resolve_dynamic_array(name, type_node, cursor, path, anchor)
        return _resolve_static_array(name, type_node, cursor, path, anchor)

    if type_node is None:
        raise UnsupportedTypeName(f"`{path}` has no type name")

    raise UnsupportedTypeName(
        f"Cannot lay out `{path}` of type `{type_node}` ({type_node.node_type})",
        type_node,
        hint="only elementary types, mappings and arrays are supported",
    )


def _classify(type_node: sol_ast.ElementaryTypeName):
    try:
        return type_from_name(type_node.name)
    except UnrecognizedType as e:
        raise e.with_annotation(type_node) from None


def _resolve_elementary(name, type_node, cursor, path, anchor) -> LayoutEntry:
    typ = _classify(type_node)
    size = typ.bits

    # values are packed into a slot until the next one would overflow it
    if not cursor.fits(size):
        cursor.next_slot()

    entry = LayoutEntry(
        name=name,
        type_tag=repr(typ),
        offset=cursor.offset,
        slot=cursor.slot,
        size=size,
        symbolic_path=anchor.render(cursor.slot),
        structural_path=path,
    )
    cursor.offset += size

    logger.debug("%s: %s at slot %d offset %d", path, entry.type_tag, entry.slot, entry.offset)
    return entry


def _key_type_tag(key_node: sol_ast.TypeName) -> str:
    if isinstance(key_node, sol_ast.ElementaryTypeName):
        return repr(_classify(key_node))
    # contract and enum keys
    return str(key_node)


def _resolve_mapping(name, type_node, cursor, path, anchor) -> LayoutEntry:
    cursor.align()
    slot = cursor.slot
    slot_expr = anchor.render(slot)

    key = KeyInfo(
        type_tag=_key_type_tag(type_node.key_type),
        symbolic_path="key",
        structural_path=f"{path}.key",
    )

    # the value lives at keccak256(h(key) . slot), which is unknown until a
    # key is given, so its shape is computed relative to slot 0
    value_anchor = SlotAnchor(f"keccak256(key . {slot_expr})", 0)
    value = _resolve_r(None, type_node.value_type, StorageCursor(), f"{path}.value", value_anchor)

    entry = LayoutEntry(
        name=name,
        type_tag="mapping",
        offset=0,
        slot=slot,
        size=WORD_BITS,
        symbolic_path=slot_expr,
        structural_path=path,
        key=key,
        children={"value": value},
    )

    # the mapping itself takes up exactly one slot
    cursor.next_slot()

    logger.debug("%s: mapping at slot %d", path, slot)
    return entry


def _resolve_static_array(name, type_node, cursor, path, anchor) -> LayoutEntry:
    if type_node.length < 1:
        raise StorageLayoutException(
            f"Invalid array length for `{path}`: {type_node.length}", type_node
        )

    cursor.align()
    start_slot = cursor.slot
    slot_expr = anchor.render(start_slot)
    element_anchor = SlotAnchor(slot_expr, start_slot)

    children: dict[str, LayoutEntry] = {}
    # elements share the cursor, so small elements pack into common slots
    for i in range(type_node.length):
        label = f"element_{i}"
        element = _resolve_r(None, type_node.base_type, cursor, f"{path}.{label}", element_anchor)
        delta = element.slot - start_slot
        children[label] = dataclasses.replace(
            element, symbolic_path=f"{slot_expr} + {delta} (offset: {element.offset})"
        )

    element_size = children["element_0"].size

    entry = LayoutEntry(
        name=name,
        type_tag="array",
        offset=0,
        slot=start_slot,
        size=element_size * type_node.length,
        symbolic_path=slot_expr,
        structural_path=path,
        children=children,
        length=type_node.length,
    )

    # whatever follows an array starts on a new slot
    cursor.align()

    logger.debug("%s: array[%d] from slot %d", path, type_node.length, start_slot)
    return entry


def _resolve_dynamic_array(name, type_node, cursor, path, anchor) -> LayoutEntry:
    cursor.align()
    pointer_slot = cursor.slot
    if pointer_slot >= MAX_SLOT:
        raise StorageLayoutException(f"Invalid storage slot for `{path}`", type_node)
    slot_expr = anchor.render(pointer_slot)

    # the length is kept at the pointer slot, elements are laid out
    # contiguously from keccak256(pointer_slot)
    content_slot = keccak256_slot(pointer_slot)
    element_anchor = SlotAnchor(f"keccak256({slot_expr})", content_slot)
    element = _resolve_r(
        None,
        type_node.base_type,
        StorageCursor(slot=content_slot),
        f"{path}.element",
        element_anchor,
    )

    entry = LayoutEntry(
        name=name,
        type_tag="array",
        offset=0,
        slot=pointer_slot,
        size=WORD_BITS,
        symbolic_path=slot_expr,
        structural_path=path,
        children={"element": element},
    )

    cursor.next_slot()

    logger.debug("%s: dynamic array at slot %d, contents at %#x", path, pointer_slot, content_slot)
    return entry


def allocate_layout(
    declarations: Iterable[Declaration],
    cursor: Optional[StorageCursor] = None,
    errors: Optional[ExceptionList] = None,
) -> dict[str, LayoutEntry]:
    """
    Lay out a sequence of top-level declarations, in order.

    The cursor persists across declarations, so each variable continues
    packing from where the previous one left off.

    Arguments
    ---------
    declarations : Iterable[tuple[str, TypeName]]
        `(name, type name node)` pairs in declaration order.
    cursor : StorageCursor, optional
        Starting position, defaults to slot 0 offset 0.
    errors : ExceptionList, optional
        If given, declarations whose type cannot be laid out are recorded
        here and skipped (the cursor is rewound to where it was before the
        failing declaration). Otherwise the first such error is raised.

    Returns
    -------
    dict
        Layout entries keyed by declaration name, in declaration order.
    """
    if cursor is None:
        cursor = StorageCursor()

    ret: InsertableOnceDict[str, LayoutEntry] = InsertableOnceDict()

    for name, type_node in declarations:
        checkpoint = cursor.copy()
        try:
            entry = resolve(name, type_node, cursor)
        except (UnrecognizedType, UnsupportedTypeName) as e:
            if errors is None:
                raise
            cursor.restore(checkpoint)
            logger.warning("skipping `%s`: %s", name, e.message)
            errors.append(e)
            continue

        if cursor.slot >= MAX_SLOT:
            raise StorageLayoutException(
                f"Invalid storage slot, `{name}` extends past slot {MAX_SLOT - 1}", type_node
            )

        try:
            ret[name] = entry
        except ValueError:
            raise StorageLayoutException(f"Duplicate declaration `{name}`", type_node) from None

    return ret


def allocate_contract_layout(
    contracts: Iterable[sol_ast.ContractDefinition], errors: Optional[ExceptionList] = None
) -> dict[str, LayoutEntry]:
    """
    Lay out the state variables of contracts which share one storage, e.g. a
    contract and its base contracts, most base first.
    """
    declarations = []
    for contract in contracts:
        for var in contract.state_variables:
            declarations.append((var.name, var.type_name))
    return allocate_layout(declarations, errors=errors)
