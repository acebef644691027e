import json
import logging
from pathlib import Path
from typing import Union

from sollayout.ast import nodes as sol_ast
from sollayout.exceptions import JSONError

logger = logging.getLogger(__name__)


def parse_to_ast(ast_source: Union[str, dict]) -> sol_ast.SourceUnit:
    """
    Parses a solc compact-JSON AST and generates sollayout AST nodes.

    Parameters
    ----------
    ast_source: str | dict
        The JSON text produced by `solc --ast-compact-json`, or the already
        decoded dict.

    Returns
    -------
    SourceUnit
        Top-level node of the source file.
    """
    if isinstance(ast_source, str):
        ast_source = _loads(ast_source)

    if not isinstance(ast_source, dict) or ast_source.get("nodeType") != "SourceUnit":
        raise JSONError("Input is not a solc compact-JSON AST (expected a SourceUnit node)")

    node = sol_ast.get_node(ast_source)
    assert isinstance(node, sol_ast.SourceUnit)  # mypy hint
    return node


def get_source_units(data: Union[str, dict]) -> dict[str, sol_ast.SourceUnit]:
    """
    Return every source unit found in solc output, keyed by source path.

    Accepts a bare compact-JSON AST as well as solc standard-JSON output
    (`{"sources": {path: {"ast": ...}}}`) or legacy `--combined-json ast`
    output (`{"sources": {path: {"AST": ...}}}`).
    """
    if isinstance(data, str):
        data = _loads(data)

    if not isinstance(data, dict):
        raise JSONError(f"Expected a JSON object, got {type(data).__name__}")

    if data.get("nodeType") == "SourceUnit":
        source_unit = parse_to_ast(data)
        return {source_unit.absolute_path or "<unknown>": source_unit}

    sources = data.get("sources")
    if not isinstance(sources, dict):
        raise JSONError("Input JSON contains neither a SourceUnit nor a `sources` field")

    ret = {}
    for path, source in sources.items():
        ast_struct = (source.get("ast") or source.get("AST")) if isinstance(source, dict) else None
        if ast_struct is None:
            logger.warning("no AST found for source %s, skipping", path)
            continue
        ret[path] = parse_to_ast(ast_struct)
    return ret


def load_json_file(file_path: Union[str, Path]) -> dict[str, sol_ast.SourceUnit]:
    with open(file_path) as fh:
        contents = fh.read()
    return get_source_units(contents)


def _loads(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise JSONError(e.msg, e.lineno, e.colno) from None
