"""
isort:skip_file
"""
import sys

from . import nodes
from .nodes import get_node
from .parse import get_source_units, load_json_file, parse_to_ast

# adds sollayout.ast.nodes classes into the local namespace
for name, obj in (
    (k, v) for k, v in nodes.__dict__.items() if type(v) is type and nodes.SolNode in v.__mro__
):
    setattr(sys.modules[__name__], name, obj)
