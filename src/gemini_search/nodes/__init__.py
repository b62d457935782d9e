"""Node types exposed to the workflow host."""

from .base import GeminiNode, ItemPlan
from .properties import NodeDescription, NodeParameter
from .search import GeminiSearchNode
from .search_tool import GeminiSearchToolNode

NODE_TYPES: dict[str, type[GeminiNode]] = {
    GeminiSearchNode.description.name: GeminiSearchNode,
    GeminiSearchToolNode.description.name: GeminiSearchToolNode,
}

__all__ = [
    "NODE_TYPES",
    "GeminiNode",
    "GeminiSearchNode",
    "GeminiSearchToolNode",
    "ItemPlan",
    "NodeDescription",
    "NodeParameter",
]
