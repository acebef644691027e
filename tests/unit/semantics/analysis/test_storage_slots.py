import pytest
from hypothesis import given
from hypothesis import strategies as st

from sollayout import ast as sol_ast
from sollayout.exceptions import UnrecognizedType, UnsupportedTypeName
from sollayout.semantics.analysis import allocate_layout, resolve
from sollayout.semantics.analysis.base import StorageCursor


def _layout(build_type, *decls):
    return allocate_layout((name, build_type(notation)) for name, notation in decls)


def test_packing_and_mapping(build_type):
    layout = _layout(
        build_type,
        ("a", "uint128"),
        ("b", "uint128"),
        ("c", "uint256"),
        ("m", ("mapping", "address", "uint256")),
    )

    assert list(layout) == ["a", "b", "c", "m"]
    assert (layout["a"].slot, layout["a"].offset, layout["a"].size) == (0, 0, 128)
    assert (layout["b"].slot, layout["b"].offset, layout["b"].size) == (0, 128, 128)
    assert (layout["c"].slot, layout["c"].offset, layout["c"].size) == (1, 0, 256)

    m = layout["m"]
    assert m.type_tag == "mapping"
    assert (m.slot, m.offset, m.size) == (2, 0, 256)
    assert m.symbolic_path == "2"
    assert m.structural_path == "m"

    assert m.key.type_tag == "address"
    assert m.key.symbolic_path == "key"
    assert m.key.structural_path == "m.key"
    assert (m.key.slot, m.key.offset, m.key.size) == (0, 0, 256)

    value = m.children["value"]
    assert value.name is None
    assert value.type_tag == "uint256"
    assert (value.slot, value.offset, value.size) == (0, 0, 256)
    assert value.symbolic_path == "keccak256(key . 2)"
    assert value.structural_path == "m.value"


def test_small_fixed_array_packs_into_one_slot(build_type, cursor):
    entry = resolve("arr", build_type(("array", "uint8", 3)), cursor)

    assert entry.type_tag == "array"
    assert entry.length == 3
    assert entry.size == 24
    assert list(entry.children) == ["element_0", "element_1", "element_2"]

    for i, label in enumerate(entry.children):
        element = entry.children[label]
        assert element.slot == 0
        assert element.offset == 8 * i
        assert element.size == 8
        assert element.symbolic_path == f"0 + 0 (offset: {8 * i})"
        assert element.structural_path == f"arr.{label}"

    # whatever comes next starts a fresh slot
    assert cursor == StorageCursor(1, 0)


def test_values_fill_slot_exactly(build_type):
    layout = _layout(
        build_type, ("a", "uint128"), ("b", "uint128"), ("c", "uint8"), ("d", "address")
    )

    assert (layout["c"].slot, layout["c"].offset) == (1, 0)
    # 8 + 160 bits still fit in slot 1
    assert (layout["d"].slot, layout["d"].offset) == (1, 8)


def test_value_overflowing_slot_moves_to_next(build_type):
    layout = _layout(build_type, ("a", "uint8"), ("b", "uint256"), ("c", "bool"))

    assert (layout["a"].slot, layout["a"].offset) == (0, 0)
    assert (layout["b"].slot, layout["b"].offset) == (1, 0)
    assert (layout["c"].slot, layout["c"].offset) == (2, 0)


@pytest.mark.parametrize("type_str,canonical", [("uint", "uint256"), ("int", "int256")])
def test_canonical_type_tag(build_type, cursor, type_str, canonical):
    entry = resolve("x", build_type(type_str), cursor)
    assert entry.type_tag == canonical
    assert entry.size == 256


def test_bytes_and_string_take_a_word(build_type):
    layout = _layout(build_type, ("flag", "bool"), ("s", "string"), ("b", "bytes"))

    assert (layout["s"].slot, layout["s"].offset, layout["s"].size) == (1, 0, 256)
    assert (layout["b"].slot, layout["b"].offset, layout["b"].size) == (2, 0, 256)


@given(slot=st.integers(min_value=0, max_value=2**64), offset=st.integers(1, 255))
def test_mapping_starts_on_fresh_slot(build_type, slot, offset):
    cursor = StorageCursor(slot, offset)
    entry = resolve("m", build_type(("mapping", "uint256", "bool")), cursor)

    assert entry.slot == slot + 1
    assert cursor == StorageCursor(slot + 2, 0)


@given(slot=st.integers(min_value=0, max_value=2**64))
def test_mapping_on_empty_slot(build_type, slot):
    cursor = StorageCursor(slot, 0)
    entry = resolve("m", build_type(("mapping", "uint256", "bool")), cursor)

    assert entry.slot == slot
    assert cursor == StorageCursor(slot + 1, 0)


@given(bits=st.sampled_from(range(8, 257, 8)), length=st.integers(1, 40))
def test_fixed_array_element_positions(build_type, bits, length):
    cursor = StorageCursor()
    entry = resolve("arr", build_type(("array", f"uint{bits}", length)), cursor)

    per_slot = 256 // bits
    for i in range(length):
        element = entry.children[f"element_{i}"]
        assert element.slot == i // per_slot
        assert element.offset == (i % per_slot) * bits

    assert entry.size == bits * length
    last = entry.children[f"element_{length - 1}"]
    assert cursor == StorageCursor(last.slot + 1, 0)


def test_fixed_array_after_packed_value(build_type):
    layout = _layout(build_type, ("a", "uint8"), ("arr", ("array", "uint8", 2)), ("b", "uint8"))

    assert layout["arr"].slot == 1
    assert layout["arr"].children["element_1"].slot == 1
    assert layout["arr"].children["element_1"].offset == 8
    assert (layout["b"].slot, layout["b"].offset) == (2, 0)


def test_nested_fixed_arrays(build_type, cursor):
    entry = resolve("grid", build_type(("array", ("array", "uint128", 3), 2)), cursor)

    inner_0 = entry.children["element_0"]
    inner_1 = entry.children["element_1"]
    assert inner_0.size == 384
    assert entry.size == 768
    assert [c.slot for c in inner_0.children.values()] == [0, 0, 1]
    assert [c.slot for c in inner_1.children.values()] == [2, 2, 3]
    assert inner_1.children["element_2"].structural_path == "grid.element_1.element_2"
    assert cursor == StorageCursor(4, 0)


def test_fixed_array_of_mappings(build_type, cursor):
    entry = resolve("maps", build_type(("array", ("mapping", "address", "uint8"), 2)), cursor)

    assert entry.children["element_0"].slot == 0
    assert entry.children["element_1"].slot == 1
    assert entry.children["element_1"].symbolic_path == "0 + 1 (offset: 0)"
    assert entry.size == 512
    assert cursor == StorageCursor(2, 0)


def test_dynamic_array(build_type, cursor, keccak):
    entry = resolve("arr", build_type(("array", "uint256", None)), cursor)

    assert entry.type_tag == "array"
    assert entry.length is None
    assert (entry.slot, entry.offset, entry.size) == (0, 0, 256)
    assert entry.symbolic_path == "0"

    element = entry.children["element"]
    assert element.slot == int.from_bytes(keccak(b"\x00" * 32), "big")
    assert element.slot == 0x290DECD9548B62A8D60345A988386FC84BA6BC95484008F6362F93160EF3E563
    assert element.offset == 0
    assert element.size == 256
    assert element.symbolic_path == "keccak256(0)"
    assert element.structural_path == "arr.element"

    assert cursor == StorageCursor(1, 0)


def test_dynamic_array_contents_are_deterministic(build_type):
    type_node = build_type(("array", "address", None))
    first = resolve("x", type_node, StorageCursor(5, 0))
    second = resolve("x", type_node, StorageCursor(5, 0))
    other = resolve("x", type_node, StorageCursor(6, 0))

    assert first == second
    assert first.children["element"].slot != other.children["element"].slot
    assert other.children["element"].symbolic_path == "keccak256(6)"


def test_dynamic_array_of_small_values(build_type, cursor):
    entry = resolve("arr", build_type(("array", "uint64", None)), cursor)

    element = entry.children["element"]
    assert element.offset == 0
    assert element.size == 64
    # the element shape describes the first element only
    assert element.slot == 0x290DECD9548B62A8D60345A988386FC84BA6BC95484008F6362F93160EF3E563


def test_nested_mapping_paths(build_type, cursor):
    entry = resolve(
        "allowed", build_type(("mapping", "address", ("mapping", "address", "uint256"))), cursor
    )

    inner = entry.children["value"]
    assert inner.type_tag == "mapping"
    assert inner.slot == 0
    assert inner.symbolic_path == "keccak256(key . 0)"
    assert inner.key.structural_path == "allowed.value.key"

    value = inner.children["value"]
    assert value.symbolic_path == "keccak256(key . keccak256(key . 0))"
    assert value.structural_path == "allowed.value.value"


def test_mapping_to_fixed_array(build_type):
    layout = _layout(build_type, ("x", "uint256"), ("m", ("mapping", "uint8", ("array", "bool", 2))))

    value = layout["m"].children["value"]
    assert value.type_tag == "array"
    assert value.symbolic_path == "keccak256(key . 1)"
    assert value.children["element_1"].offset == 8
    assert value.children["element_1"].slot == 0
    assert layout["m"].key.type_tag == "uint8"


def test_mapping_to_dynamic_array(build_type, cursor):
    entry = resolve("m", build_type(("mapping", "address", ("array", "uint256", None))), cursor)

    value = entry.children["value"]
    assert value.symbolic_path == "keccak256(key . 0)"
    assert value.children["element"].symbolic_path == "keccak256(keccak256(key . 0))"


def test_unrecognized_type(build_type, cursor):
    with pytest.raises(UnrecognizedType) as e:
        resolve("x", build_type("foo256"), cursor)

    assert "foo256" in e.value.message
    assert cursor == StorageCursor(0, 0)


def test_unrecognized_type_nested(build_type, cursor):
    with pytest.raises(UnrecognizedType):
        resolve("m", build_type(("mapping", "address", ("array", "uint7", 2))), cursor)


def test_unsupported_type_name(cursor):
    type_node = sol_ast.UserDefinedTypeName(name="MyStruct")
    with pytest.raises(UnsupportedTypeName) as e:
        resolve("s", type_node, cursor)

    assert "MyStruct" in str(e.value)


def test_missing_type_name(cursor):
    with pytest.raises(UnsupportedTypeName):
        resolve("x", None, cursor)
