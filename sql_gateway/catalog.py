# sql_gateway/catalog.py

import logging
from typing import Any, Dict, Iterable, Iterator, List

from .errors import UnknownOperation
from .models import OperationDefinition

logger = logging.getLogger(__name__)


class Catalog:
    """
    Read-only registry of operations, keyed by name.

    Built once at startup from a sequence of definitions; there is no way to
    register an operation afterwards.
    """

    def __init__(self, definitions: Iterable[OperationDefinition]):
        entries: Dict[str, OperationDefinition] = {}
        for definition in definitions:
            if definition.name in entries:
                raise ValueError(f"Duplicate operation name: {definition.name}")
            entries[definition.name] = definition
        self._entries = entries
        logger.info(f"Operation catalog built with {len(entries)} tools")

    def lookup(self, name: Any) -> OperationDefinition:
        definition = self._entries.get(name) if isinstance(name, str) else None
        if definition is None:
            raise UnknownOperation(str(name))
        return definition

    def tools(self) -> List[Dict[str, Any]]:
        """Tool descriptors for tools/list, in registration order."""
        return [d.to_tool() for d in self._entries.values()]

    def toolset(self) -> Dict[str, Dict[str, Any]]:
        """Tool descriptors keyed by name, for the /api/toolset manifest."""
        return {name: d.to_tool() for name, d in self._entries.items()}

    def __iter__(self) -> Iterator[OperationDefinition]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
