from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from solgraph.colorscheme import ColorScheme, DEFAULT_COLOR_SCHEME


class GraphOptions(BaseModel):
    """
    Options of a call graph run.
    """
    enable_modifier_edges: bool = False
    resolve_library_dispatch: bool = True
    # Expand the inputs to their import closure first
    expand_imports: bool = False
    # Inputs are Solidity source texts instead of file paths
    source_strings: bool = False
    project_root: Optional[Path] = None  # Default: current working directory
    color_scheme: ColorScheme = Field(default_factory=lambda: DEFAULT_COLOR_SCHEME.model_copy(deep=True))


class LinearizationEntry(BaseModel):
    """
    Ancestor order of one contract, as reported by the CLI.
    """
    contract: str
    kind: str
    linearization: List[str]
