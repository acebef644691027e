import logging
import os
from dataclasses import dataclass, field
from typing import Optional

SOLLAYOUT_TRACEBACK_LIMIT: Optional[int]

_tb_limit_str = os.environ.get("SOLLAYOUT_TRACEBACK_LIMIT")
if _tb_limit_str is not None:
    SOLLAYOUT_TRACEBACK_LIMIT = int(_tb_limit_str)
else:
    SOLLAYOUT_TRACEBACK_LIMIT = None

SOLLAYOUT_LOG_LEVEL = os.environ.get("SOLLAYOUT_LOG_LEVEL", "WARNING").upper()


def get_log_level(verbose: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    level = logging.getLevelName(SOLLAYOUT_LOG_LEVEL)
    if not isinstance(level, int):
        raise ValueError(f"unrecognized log level: {SOLLAYOUT_LOG_LEVEL}")
    return level


@dataclass
class Settings:
    # record declarations with unrecognized types and keep going,
    # instead of failing the whole contract
    skip_invalid: bool = False
    # restrict output to these contracts (all contracts if empty)
    contract_names: list[str] = field(default_factory=list)

    def wants_contract(self, name: str) -> bool:
        return not self.contract_names or name in self.contract_names
