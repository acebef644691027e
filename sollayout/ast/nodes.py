import copy
import functools
import re
import sys
from typing import Any, Optional

from sollayout.exceptions import JSONError

NODE_BASE_ATTRIBUTES = ("_children", "_depth", "_parent", "node_type", "id")
NODE_SRC_ATTRIBUTES = ("src",)

# `uint256[3]`, `uint8[2][4] storage ref`, ...
_ARRAY_SUFFIX_RE = re.compile(r"\[(\d*)\](?: storage (?:ref|pointer))?$")


def get_node(ast_struct: dict, parent: Optional["SolNode"] = None) -> "SolNode":
    """
    Convert a solc compact-JSON AST structure to a sollayout AST node. Entry
    point to constructing sollayout AST nodes.

    This is a recursive call, all child nodes of the input value are also
    converted to sollayout nodes.

    Parameters
    ----------
    ast_struct: dict
        solc AST dict to generate the node from.
    parent: SolNode, optional
        Parent node of the node being created.

    Returns
    -------
    SolNode
        The generated AST object.
    """
    if not isinstance(ast_struct, dict) or "nodeType" not in ast_struct:
        raise JSONError(f"Expected an AST node, got {type(ast_struct).__name__}")

    ast_struct = copy.copy(ast_struct)
    node_type = ast_struct.pop("nodeType")

    sol_class = getattr(sys.modules[__name__], node_type, None)
    if not isinstance(sol_class, type) or not issubclass(sol_class, SolNode):
        # functions, events, pragmas etc. carry no storage, keep only the shell
        return IgnoredNode(parent=parent, node_type=node_type, **ast_struct)

    return sol_class(parent=parent, node_type=node_type, **ast_struct)


def _is_node_struct(obj) -> bool:
    return isinstance(obj, dict) and "nodeType" in obj


def _to_node(obj, parent):
    # if object is a dict representing a node, convert to a sollayout node
    if _is_node_struct(obj):
        return get_node(obj, parent)
    if isinstance(obj, SolNode):
        obj.set_parent(parent)
    return obj


class SolNode:
    """
    Base class for all sollayout AST nodes.

    Nodes are generated from, and closely resemble, the nodes of the solc
    compact-JSON AST. Only the fields that matter for storage layout are kept.

    Class Attributes
    ----------------
    __slots__ : Tuple
        Allowed field names for the node.
    _translated_fields : Dict, optional
        solc field names that are stored under a different (snake_case) name.
    """

    __slots__ = NODE_BASE_ATTRIBUTES + NODE_SRC_ATTRIBUTES

    _translated_fields: dict = {}

    def __init__(self, parent: Optional["SolNode"] = None, **kwargs: Any):
        """
        AST node initializer method.

        Nodes built from JSON should be created using `get_node`. Type name
        nodes may also be instantiated directly, e.g.
        `Mapping(key_type=ElementaryTypeName(name="address"), ...)`.

        Parameters
        ----------
        parent: SolNode, optional
            Node which contains this node.
        **kwargs : dict
            Dictionary of fields to be included within the node.
        """
        self.set_parent(parent)
        self._children: list = []
        self.node_type = kwargs.pop("node_type", type(self).__name__)
        self.id = kwargs.pop("id", None)

        for field_name in NODE_SRC_ATTRIBUTES:
            # when a source offset is not available, use the parent's source offset
            value = kwargs.pop(field_name, None)
            if value is None:
                value = getattr(parent, field_name, None)
            setattr(self, field_name, value)

        for field_name in self.get_fields():
            setattr(self, field_name, None)

        for field_name, value in kwargs.items():
            field_name = self._translated_fields.get(field_name, field_name)
            if field_name not in self.get_fields():
                continue

            if isinstance(value, list):
                value = [_to_node(i, self) for i in value]
            else:
                value = _to_node(value, self)
            setattr(self, field_name, value)

        if parent is not None:
            parent._children.append(self)

    @property
    def parent(self):
        return self._parent

    def set_parent(self, parent: Optional["SolNode"]):
        self._parent = parent
        self._depth = getattr(parent, "_depth", -1) + 1

    @classmethod
    @functools.lru_cache(maxsize=None)
    def get_fields(cls) -> set:
        """
        Return a set of field names for this node.

        Base attributes and source offsets are not included.
        """
        slot_fields = [x for i in cls.__mro__ for x in getattr(i, "__slots__", [])]
        skip = NODE_BASE_ATTRIBUTES + NODE_SRC_ATTRIBUTES
        return set(i for i in slot_fields if not i.startswith("_") and i not in skip)

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        for field_name in self.get_fields():
            if getattr(self, field_name, None) != getattr(other, field_name, None):
                return False
        return True

    __hash__ = None  # type: ignore

    def __repr__(self):
        cls = type(self)
        fields = ", ".join(f"{k}={getattr(self, k)!r}" for k in sorted(self.get_fields()))
        return f"{cls.__name__}({fields})"

    def get_children(self, node_type=None, reverse: bool = False) -> list:
        """
        Return a list of children of this node which are of the given type.

        Arguments
        ---------
        node_type : SolNode | tuple, optional
            A node type or tuple of types. If given, only child nodes of
            these types are returned.
        reverse : bool, optional
            If `True`, the order of the children is reversed prior to filtering.

        Returns
        -------
        list
            Child nodes matching the filter conditions.
        """
        children = self._children.copy()
        if reverse:
            children.reverse()
        if node_type is None:
            return children
        return [i for i in children if isinstance(i, node_type)]

    def get_ancestor(self, node_type=None):
        """
        Return an ancestor node for this node, optionally filtered by type.
        """
        if node_type is None or self._parent is None:
            return self._parent
        if isinstance(self._parent, node_type):
            return self._parent
        return self._parent.get_ancestor(node_type)


class IgnoredNode(SolNode):
    """
    Any solc node which is irrelevant to storage layout (functions, events,
    pragmas, modifiers ...). Only the original `nodeType` is retained.
    """

    __slots__ = ()

    def __eq__(self, other):
        return isinstance(other, IgnoredNode) and self.node_type == other.node_type

    def __str__(self):
        return self.node_type


class SourceUnit(SolNode):
    __slots__ = ("absolute_path", "nodes")
    _translated_fields = {"absolutePath": "absolute_path"}

    @property
    def contracts(self) -> list["ContractDefinition"]:
        return self.get_children(ContractDefinition)


class ContractDefinition(SolNode):
    __slots__ = ("name", "contract_kind", "linearized_base_contracts", "nodes")
    _translated_fields = {
        "contractKind": "contract_kind",
        "linearizedBaseContracts": "linearized_base_contracts",
    }

    @property
    def state_variables(self) -> list["VariableDeclaration"]:
        return [
            node
            for node in self.get_children(VariableDeclaration)
            if node.is_state_variable and node.occupies_storage
        ]


class VariableDeclaration(SolNode):
    __slots__ = (
        "name",
        "type_name",
        "constant",
        "mutability",
        "state_variable",
        "visibility",
    )
    _translated_fields = {"typeName": "type_name", "stateVariable": "state_variable"}

    @property
    def is_state_variable(self) -> bool:
        # solc always sets `stateVariable`; hand-built nodes default to True
        return self.state_variable is not False

    @property
    def occupies_storage(self) -> bool:
        # constants are inlined and immutables live in code, not storage
        if self.constant:
            return False
        return self.mutability not in ("constant", "immutable")


class Literal(SolNode):
    __slots__ = ("kind", "value", "subdenomination")

    def to_int(self) -> Optional[int]:
        if self.kind != "number" or self.subdenomination is not None:
            return None
        value = str(self.value).replace("_", "")
        try:
            return int(value, 0)
        except ValueError:
            return None


class TypeName(SolNode):
    """
    Base class for the type name nodes of the type tree.
    """

    __slots__ = ("type_descriptions",)
    _translated_fields = {"typeDescriptions": "type_descriptions"}

    @property
    def type_string(self) -> Optional[str]:
        if isinstance(self.type_descriptions, dict):
            return self.type_descriptions.get("typeString")
        return None

    def __str__(self):
        return self.type_string or self.node_type


class ElementaryTypeName(TypeName):
    __slots__ = ("name", "state_mutability")
    _translated_fields = {**TypeName._translated_fields, "stateMutability": "state_mutability"}

    def __str__(self):
        return self.name


class Mapping(TypeName):
    __slots__ = ("key_type", "value_type")
    _translated_fields = {
        **TypeName._translated_fields,
        "keyType": "key_type",
        "valueType": "value_type",
    }

    def __str__(self):
        return f"mapping({self.key_type} => {self.value_type})"


class ArrayTypeName(TypeName):
    """
    Array type name. `length` is `None` for dynamically sized arrays.

    solc stores the length as an expression node; a number literal is
    reduced to an int here. Any other expression (e.g. a named constant)
    is resolved through the `typeString` that solc attaches to the node.
    """

    __slots__ = ("base_type", "length")
    _translated_fields = {**TypeName._translated_fields, "baseType": "base_type"}

    def __init__(self, parent=None, **kwargs):
        super().__init__(parent=parent, **kwargs)
        if isinstance(self.length, SolNode):
            self.length = self._reduce_length(self.length)

    def _reduce_length(self, length_node: SolNode) -> int:
        if isinstance(length_node, Literal):
            value = length_node.to_int()
            if value is not None:
                return value

        type_string = self.type_string
        if type_string is not None:
            m = _ARRAY_SUFFIX_RE.search(type_string)
            if m is not None and m.group(1):
                return int(m.group(1))

        raise JSONError(f"Cannot determine array length from {length_node.node_type} node")

    @property
    def is_dynamic(self) -> bool:
        return self.length is None

    def __str__(self):
        length = "" if self.length is None else self.length
        return f"{self.base_type}[{length}]"


class UserDefinedTypeName(TypeName):
    # structs, enums, contracts and user defined value types
    __slots__ = ("name", "path_node")
    _translated_fields = {**TypeName._translated_fields, "pathNode": "path_node"}

    def __str__(self):
        if self.name is not None:
            return self.name
        if isinstance(self.path_node, IdentifierPath):
            return self.path_node.name
        return super().__str__()


class IdentifierPath(SolNode):
    __slots__ = ("name",)


class FunctionTypeName(TypeName):
    __slots__ = ()

