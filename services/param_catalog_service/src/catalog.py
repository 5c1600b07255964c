from operator import attrgetter
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .schemas import ParameterInfo
from .validator import validate_sorted_unique


class Catalog:
    """
    Immutable, name-ordered collection of parameters.

    The constructor sorts its input by name (stable) and rejects duplicate
    names, so every instance satisfies the ordering the reconciler's merge
    relies on.
    """

    __slots__ = ("_params", "_index")

    def __init__(self, params: Iterable[ParameterInfo] = ()):
        ordered = tuple(sorted(params, key=attrgetter("name")))
        validate_sorted_unique([param.name for param in ordered])
        self._params: Tuple[ParameterInfo, ...] = ordered
        self._index: Dict[str, ParameterInfo] = {param.name: param for param in ordered}

    @property
    def params(self) -> Tuple[ParameterInfo, ...]:
        return self._params

    def names(self) -> List[str]:
        return [param.name for param in self._params]

    def get(self, name: str) -> Optional[ParameterInfo]:
        return self._index.get(name)

    def to_records(self) -> List[Dict[str, Any]]:
        return [param.to_record() for param in self._params]

    def __len__(self) -> int:
        return len(self._params)

    def __iter__(self) -> Iterator[ParameterInfo]:
        return iter(self._params)

    def __getitem__(self, position: int) -> ParameterInfo:
        return self._params[position]

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return self._params == other._params

    def __hash__(self) -> int:
        return hash(self._params)

    def __repr__(self) -> str:
        return f"Catalog({len(self._params)} parameters)"
