from .path import PathChain
from .scope import Scope
from .search import breadth_first, depth_first
from .thought import Definition, Thought

__all__ = (
    # Chains
    "PathChain",
    # Search
    "breadth_first",
    "depth_first",
    # Records
    "Scope",
    "Thought",
    "Definition",
)
