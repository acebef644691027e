from pathlib import Path
from typing import Callable, Optional, Union

import sollayout.compiler.output as output
from sollayout.compiler.phases import CompilerData
from sollayout.compiler.settings import Settings
from sollayout.typing import OutputFormats
from sollayout.utils import timeit

OUTPUT_FORMATS = {
    # requires source units
    "ast": output.build_ast_output,
    # requires storage layouts
    "layout": output.build_layout_output,
    "layout_json": output.build_layout_json_output,
    "layout_tree": output.build_layout_tree_output,
}


def compile_from_ast(
    ast_input: Union[str, dict],
    output_formats: Optional[OutputFormats] = None,
    settings: Optional[Settings] = None,
    exc_handler: Optional[Callable] = None,
) -> dict:
    """
    Main entry point into the layout engine.

    Generate consumable output(s) for every contract found in a solc AST.
    Basically, a wrapper around CompilerData which munges the layout data
    into the requested output formats.

    Arguments
    ---------
    ast_input: str | dict
        solc compact-JSON AST (or standard-JSON output), as text or decoded.
    output_formats: List, optional
        List of outputs to generate. Possible options are all the keys
        in `OUTPUT_FORMATS`. If not given, the storage layout is generated.
    settings: Settings, optional
        Layout settings.
    exc_handler: Callable, optional
        Callable used to handle exceptions if layout fails. Should accept
        two arguments - the name of the contract, and the exception that was raised

    Returns
    -------
    Dict
        Output per contract as `{'contract name': {'output key': "output data"}}`
    """
    if output_formats is None:
        output_formats = ("layout",)

    compiler_data = CompilerData(ast_input, settings)

    ret: dict = {}
    with timeit("storage layout"):
        for contract_name in compiler_data.contracts:
            contract_output = {}
            for output_format in output_formats:
                if output_format not in OUTPUT_FORMATS:
                    raise ValueError(f"Unsupported format type {repr(output_format)}")
                try:
                    formatter = OUTPUT_FORMATS[output_format]
                    contract_output[output_format] = formatter(compiler_data, contract_name)
                except Exception as exc:
                    if exc_handler is not None:
                        exc_handler(contract_name, exc)
                    else:
                        raise exc
            ret[contract_name] = contract_output

    return ret


def compile_file(file_path: Union[str, Path], *args, **kwargs) -> dict:
    """
    Do the same thing as compile_from_ast but reads the AST from a file.
    """
    with open(file_path) as fh:
        ast_input = fh.read()
    return compile_from_ast(ast_input, *args, **kwargs)
