import contextlib
import itertools
import json
import os

_node_ids = itertools.count(1)


@contextlib.contextmanager
def working_directory(directory):
    tmp = os.getcwd()
    try:
        os.chdir(directory)
        yield
    finally:
        os.chdir(tmp)


# helpers building solc compact-JSON AST fragments


def elementary(name, type_string=None):
    return {
        "nodeType": "ElementaryTypeName",
        "id": next(_node_ids),
        "name": name,
        "src": "0:0:0",
        "typeDescriptions": {"typeString": type_string or name},
    }


def mapping(key_type, value_type):
    return {
        "nodeType": "Mapping",
        "id": next(_node_ids),
        "keyType": key_type,
        "valueType": value_type,
        "src": "0:0:0",
    }


def array(base_type, length=None):
    ret = {
        "nodeType": "ArrayTypeName",
        "id": next(_node_ids),
        "baseType": base_type,
        "length": None,
        "src": "0:0:0",
    }
    if length is not None:
        ret["length"] = {
            "nodeType": "Literal",
            "id": next(_node_ids),
            "kind": "number",
            "value": str(length),
            "src": "0:0:0",
        }
    return ret


def var(name, type_name, mutability="mutable", constant=False):
    return {
        "nodeType": "VariableDeclaration",
        "id": next(_node_ids),
        "name": name,
        "typeName": type_name,
        "constant": constant,
        "mutability": mutability,
        "stateVariable": True,
        "visibility": "internal",
        "src": "0:0:0",
    }


def contract(name, nodes, contract_id=None, bases=None, kind="contract"):
    contract_id = contract_id or next(_node_ids)
    return {
        "nodeType": "ContractDefinition",
        "id": contract_id,
        "name": name,
        "contractKind": kind,
        "linearizedBaseContracts": [contract_id] + list(bases or []),
        "nodes": nodes,
        "src": "0:0:0",
    }


def source_unit(nodes, path="Contract.sol"):
    return {
        "nodeType": "SourceUnit",
        "id": next(_node_ids),
        "absolutePath": path,
        "nodes": [{"nodeType": "PragmaDirective", "id": next(_node_ids)}] + list(nodes),
        "src": "0:0:0",
    }


def dumps(ast_struct):
    return json.dumps(ast_struct)
