from .core.patch_table import PHOENIX_PATCH_TABLE, PatchRule, PatchTable
from .core.patcher import apply_patches, check_coverage, patch_schema
from .core.registry import GeneratorRegistry
from .core.schema_io import load_schema, save_schema

__all__ = [
    "__version__",
    "GeneratorRegistry",
    "PHOENIX_PATCH_TABLE",
    "PatchRule",
    "PatchTable",
    "apply_patches",
    "check_coverage",
    "load_schema",
    "patch_schema",
    "save_schema",
]

__version__ = "0.1.0"
