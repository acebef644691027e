import json
from typing import Any, Optional

from sollayout.ast import nodes as sol_ast
from sollayout.compiler.phases import CompilerData
from sollayout.semantics.analysis.base import KeyInfo, LayoutEntry
from sollayout.typing import StorageLayout
from sollayout.utils import indent


def key_to_dict(key: KeyInfo) -> dict:
    return {
        "type": key.type_tag,
        "offset": key.offset,
        "slot": key.slot,
        "size": key.size,
        "symbolic_path": key.symbolic_path,
        "structural_path": key.structural_path,
    }


def key_from_dict(data: dict) -> KeyInfo:
    return KeyInfo(
        type_tag=data["type"],
        offset=data["offset"],
        slot=data["slot"],
        size=data["size"],
        symbolic_path=data["symbolic_path"],
        structural_path=data["structural_path"],
    )


def entry_to_dict(entry: LayoutEntry) -> dict:
    ret: dict[str, Any] = {"name": entry.name, "type": entry.type_tag}
    if entry.key is not None:
        ret["key"] = key_to_dict(entry.key)
    if entry.children is not None:
        ret["children"] = {label: entry_to_dict(c) for label, c in entry.children.items()}
    ret["offset"] = entry.offset
    ret["slot"] = entry.slot
    ret["size"] = entry.size
    ret["symbolic_path"] = entry.symbolic_path
    ret["structural_path"] = entry.structural_path
    if entry.length is not None:
        ret["length"] = entry.length
    return ret


def entry_from_dict(data: dict) -> LayoutEntry:
    key = data.get("key")
    children = data.get("children")
    if children is not None:
        children = {label: entry_from_dict(c) for label, c in children.items()}

    return LayoutEntry(
        name=data.get("name"),
        type_tag=data["type"],
        offset=data["offset"],
        slot=data["slot"],
        size=data["size"],
        symbolic_path=data["symbolic_path"],
        structural_path=data["structural_path"],
        key=key_from_dict(key) if key is not None else None,
        children=children,
        length=data.get("length"),
    )


def layout_to_dict(layout: dict[str, LayoutEntry]) -> StorageLayout:
    return {name: entry_to_dict(entry) for name, entry in layout.items()}


def layout_from_dict(data: StorageLayout) -> dict[str, LayoutEntry]:
    return {name: entry_from_dict(entry) for name, entry in data.items()}


def layout_to_json(layout: dict[str, LayoutEntry], json_indent: Optional[int] = 2) -> str:
    return json.dumps(layout_to_dict(layout), indent=json_indent)


def layout_from_json(text: str) -> dict[str, LayoutEntry]:
    return layout_from_dict(json.loads(text))


def _render_entry(label: str, entry: LayoutEntry) -> str:
    type_str = entry.type_tag
    if entry.is_array:
        length = "" if entry.length is None else entry.length
        type_str = f"{type_str}[{length}]"

    placement = f"offset {entry.offset}, size {entry.size}"
    ret = f"{label}: {type_str} @ {entry.symbolic_path} ({placement})\n"

    body = ""
    if entry.key is not None:
        body += f"key: {entry.key.type_tag}\n"
    for child_label, child in (entry.children or {}).items():
        body += _render_entry(child_label, child)

    return ret + indent(body, "  ")


def render_layout_tree(layout: dict[str, LayoutEntry]) -> str:
    """
    Render a layout as an indented, human readable tree, e.g.

        owners: mapping @ 2 (offset 0, size 256)
          key: address
          value: uint256 @ keccak256(key . 2) (offset 0, size 256)
    """
    return "".join(_render_entry(name, entry) for name, entry in layout.items())


def _render_type_name(type_node: Optional[sol_ast.SolNode]) -> str:
    if isinstance(type_node, sol_ast.ElementaryTypeName):
        return f"Type: {type_node.name}\n"
    if isinstance(type_node, sol_ast.Mapping):
        ret = "Mapping:\n"
        ret += indent("Key Type:\n" + indent(_render_type_name(type_node.key_type), "  "), "  ")
        ret += indent("Value Type:\n" + indent(_render_type_name(type_node.value_type), "  "), "  ")
        return ret
    if isinstance(type_node, sol_ast.ArrayTypeName):
        length = "dynamic" if type_node.is_dynamic else type_node.length
        return f"Array ({length}) of:\n" + indent(_render_type_name(type_node.base_type), "  ")
    return f"Unsupported: {type_node}\n"


def build_ast_output(compiler_data: CompilerData, contract_name: str) -> str:
    contract = compiler_data.contracts[contract_name]
    ret = f"Contract: {contract.name}\n"
    for var in contract.state_variables:
        body = f"Variable: {var.name}\n" + indent(_render_type_name(var.type_name), "  ")
        ret += indent(body, "  ")
    return ret


def build_layout_output(compiler_data: CompilerData, contract_name: str) -> StorageLayout:
    return layout_to_dict(compiler_data.storage_layouts[contract_name])


def build_layout_json_output(compiler_data: CompilerData, contract_name: str) -> str:
    return layout_to_json(compiler_data.storage_layouts[contract_name])


def build_layout_tree_output(compiler_data: CompilerData, contract_name: str) -> str:
    return render_layout_tree(compiler_data.storage_layouts[contract_name])
