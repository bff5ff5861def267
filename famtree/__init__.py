"""famtree package initialization."""

from importlib.metadata import version, PackageNotFoundError

from .api import build_layout, build_tree
from .graph import RelationGraph
from .hierarchy import build_hierarchy_chain
from .layout import LayoutConfig, compute_layout
from .reconstruct import RootRequest, reconstruct
from .viewport import Viewport

__all__ = [
    "__version__",
    "LayoutConfig",
    "RelationGraph",
    "RootRequest",
    "Viewport",
    "build_hierarchy_chain",
    "build_layout",
    "build_tree",
    "compute_layout",
    "reconstruct",
]

try:
    __version__ = version("famtree")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"
