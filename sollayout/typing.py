from typing import Sequence

# Compiler
ContractName = str
AstPath = str
OutputFormats = Sequence[str]
StorageLayout = dict
