import hypothesis
import pytest

from sollayout import ast as sol_ast
from sollayout.semantics.analysis.base import StorageCursor
from sollayout.utils import keccak256
from tests.utils import working_directory

############
# PATCHING #
############


# disable hypothesis deadline globally
hypothesis.settings.register_profile("ci", deadline=None)
hypothesis.settings.load_profile("ci")


@pytest.fixture
def chdir_tmp_path(tmp_path):
    with working_directory(tmp_path):
        yield


@pytest.fixture
def keccak():
    return keccak256


@pytest.fixture
def make_file(tmp_path):
    # writes file_contents to file_name, creating it in the
    # tmp_path directory. returns final path.
    def fn(file_name, file_contents):
        path = tmp_path / file_name
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w") as f:
            f.write(file_contents)

        return path

    return fn


@pytest.fixture
def cursor():
    return StorageCursor()


@pytest.fixture(scope="session")
def build_type():
    """
    Yields a helper function for building a type name node from a compact
    notation: a str is an elementary type, `("mapping", k, v)` a mapping and
    `("array", base, length)` an array (`length=None` for dynamic arrays).
    """

    def _build_type(notation):
        if isinstance(notation, str):
            return sol_ast.ElementaryTypeName(name=notation)
        kind, *args = notation
        if kind == "mapping":
            key, value = args
            return sol_ast.Mapping(key_type=_build_type(key), value_type=_build_type(value))
        if kind == "array":
            base, length = args
            return sol_ast.ArrayTypeName(base_type=_build_type(base), length=length)
        raise ValueError(f"unknown type notation {notation}")

    yield _build_type
