import logging
from functools import cached_property
from typing import Optional

from sollayout import ast as sol_ast
from sollayout.compiler.settings import Settings
from sollayout.exceptions import ExceptionList
from sollayout.semantics.analysis.base import LayoutEntry
from sollayout.semantics.analysis.data_positions import allocate_contract_layout

logger = logging.getLogger(__name__)


class CompilerData:
    """
    Object for fetching and storing layout data for the contracts of one
    solc AST input.

    This object acts as a wrapper over the pure layout functions, triggering
    each phase as needed and providing the data for use when generating the
    final outputs.

    Attributes
    ----------
    source_units : dict
        Parsed source units, keyed by source path
    contracts : dict
        Contract definitions to report on, keyed by contract name
    storage_layouts : dict
        Storage layout of each contract, keyed by contract name
    errors : dict
        Declarations skipped per contract (only with `settings.skip_invalid`)
    """

    def __init__(self, ast_input, settings: Optional[Settings] = None) -> None:
        """
        Initialization method.

        Arguments
        ---------
        ast_input : str | dict
            solc compact-JSON AST, or solc standard-JSON output, as text or
            decoded JSON.
        settings: Settings, optional
            Layout settings.
        """
        self.ast_input = ast_input
        self.settings = settings or Settings()
        self._errors: dict[str, ExceptionList] = {}

    @cached_property
    def source_units(self) -> dict[str, sol_ast.SourceUnit]:
        return sol_ast.get_source_units(self.ast_input)

    @cached_property
    def _contracts_by_id(self) -> dict[int, sol_ast.ContractDefinition]:
        ret = {}
        for source_unit in self.source_units.values():
            for contract in source_unit.contracts:
                ret[contract.id] = contract
        return ret

    @cached_property
    def contracts(self) -> dict[str, sol_ast.ContractDefinition]:
        ret = {}
        for source_unit in self.source_units.values():
            for contract in source_unit.contracts:
                if contract.contract_kind in ("interface", "library"):
                    continue
                if not self.settings.wants_contract(contract.name):
                    continue
                ret[contract.name] = contract
        return ret

    def storage_chain(self, contract: sol_ast.ContractDefinition) -> list:
        """
        Return the contracts whose state variables share the storage of
        `contract`, most base first (reverse C3 linearization).
        """
        linearized = contract.linearized_base_contracts
        if not linearized:
            return [contract]

        ret = []
        for contract_id in reversed(linearized):
            base = self._contracts_by_id.get(contract_id)
            if base is None:
                logger.warning(
                    "base contract %s of %s not found in input, its state variables are missing",
                    contract_id,
                    contract.name,
                )
                continue
            ret.append(base)
        return ret

    @property
    def errors(self) -> dict[str, ExceptionList]:
        # populated as a side effect of laying out the contracts
        _ = self.storage_layouts
        return self._errors

    @cached_property
    def storage_layouts(self) -> dict[str, dict[str, LayoutEntry]]:
        ret = {}
        for name, contract in self.contracts.items():
            errors = ExceptionList() if self.settings.skip_invalid else None
            layout = allocate_contract_layout(self.storage_chain(contract), errors=errors)
            if errors:
                self._errors[name] = errors
            logger.info("%s: laid out %d state variables", name, len(layout))
            ret[name] = layout
        return ret
