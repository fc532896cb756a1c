"""
Value types shared by the catalog, validator, generators and dispatcher.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple


class FieldKind(Enum):
    """Argument kinds understood by the validator."""
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"  # array of objects, validated against FieldSpec.items


class ResultMode(Enum):
    """How the dispatcher turns an ExecutionResult into a payload."""
    ROWS = "rows"
    ACKNOWLEDGE = "acknowledge"
    QUERY_RESULT = "query_result"
    PROCEDURE_RESULT = "procedure_result"


@dataclass(frozen=True)
class FieldSpec:
    """One declared argument of an operation."""
    name: str
    kind: FieldKind
    description: str = ""
    required: bool = False
    allowed_values: Optional[Tuple[str, ...]] = None
    default: Any = None
    minimum: Optional[int] = None
    items: Tuple["FieldSpec", ...] = ()

    def to_json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.kind.value}
        if self.description:
            schema["description"] = self.description
        if self.allowed_values:
            schema["enum"] = list(self.allowed_values)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.default is not None:
            schema["default"] = self.default
        if self.kind is FieldKind.OBJECT:
            schema["additionalProperties"] = True
        if self.kind is FieldKind.ARRAY:
            schema["items"] = object_schema(self.items)
        return schema


def object_schema(fields: Tuple[FieldSpec, ...]) -> Dict[str, Any]:
    """Render an ordered field tuple as a JSON-Schema object."""
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": {f.name: f.to_json_schema() for f in fields},
    }
    required = [f.name for f in fields if f.required]
    if required:
        schema["required"] = required
    return schema


ValidatedArguments = Dict[str, Any]


@dataclass(frozen=True)
class SqlStatement:
    """SQL text plus bound parameters for a single call."""
    text: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    target: Optional[str] = None  # fully-qualified object acted upon, for acknowledgments


Generator = Callable[[ValidatedArguments], SqlStatement]


@dataclass(frozen=True)
class OperationDefinition:
    name: str
    description: str
    category: str
    fields: Tuple[FieldSpec, ...]
    generator: Generator
    result_mode: ResultMode = ResultMode.ROWS
    acknowledgment: Optional[str] = None  # e.g. "Table {target} created successfully."

    @property
    def required_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.required]

    def to_tool(self) -> Dict[str, Any]:
        """MCP tool descriptor, as served by tools/list."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": object_schema(self.fields),
        }


@dataclass(frozen=True)
class ExecutionResult:
    rows: List[Mapping[str, Any]] = field(default_factory=list)
    rows_affected: int = 0
    result_set_count: int = 0


@dataclass(frozen=True)
class ResponseEnvelope:
    """Uniform response for every call; callers branch on ``ok``."""
    ok: bool
    payload: Any
    error_kind: Optional[str] = None

    def as_text(self) -> str:
        if isinstance(self.payload, str):
            return self.payload
        # default=str covers datetime, Decimal and UUID values from the driver
        return json.dumps(self.payload, indent=2, default=str)
