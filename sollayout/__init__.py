from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

from sollayout.compiler import compile_file, compile_from_ast

__version__: str
try:
    __version__ = _version(__name__)
except PackageNotFoundError:
    __version__ = "0.0.0"
