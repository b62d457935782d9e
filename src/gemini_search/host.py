"""Host-facing seams: parameter reading and node item shapes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypedDict, runtime_checkable

from gemini_search.errors import ParameterError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

_MISSING: Any = object()


class NodeItem(TypedDict):
    """One output item, paired with the input item it came from."""

    json: dict[str, Any]
    paired_item: int


@runtime_checkable
class ParameterReader(Protocol):
    """Host capability that resolves a node parameter for one input item."""

    def get_node_parameter(
        self, name: str, item_index: int, default: Any = _MISSING
    ) -> Any:
        """Return the parameter value, or *default*; raise when neither exists."""
        ...


class StaticParameters:
    """ParameterReader backed by plain mappings.

    ``shared`` applies to every item; ``per_item[i]`` overrides it for item
    *i*. Useful outside a host and in tests.

    Example:
        params = StaticParameters(
            {"model": "gemini-2.5-flash", "prompt": "What is new?"},
            per_item=[{}, {"prompt": "Second question"}],
        )
    """

    def __init__(
        self,
        shared: Mapping[str, Any] | None = None,
        *,
        per_item: Sequence[Mapping[str, Any]] = (),
    ) -> None:
        self._shared = dict(shared or {})
        self._per_item = [dict(values) for values in per_item]

    def get_node_parameter(
        self, name: str, item_index: int, default: Any = _MISSING
    ) -> Any:
        if item_index < len(self._per_item) and name in self._per_item[item_index]:
            return self._per_item[item_index][name]
        if name in self._shared:
            return self._shared[name]
        if default is not _MISSING:
            return default
        raise ParameterError(
            f'Could not get parameter "{name}"',
            hint="Set the parameter on the node or pass a default.",
            parameter=name,
            item_index=item_index,
        )
