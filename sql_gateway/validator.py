# sql_gateway/validator.py

from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ErrorKind, ValidationError
from .models import FieldKind, FieldSpec, OperationDefinition, ValidatedArguments

_KIND_CHECKS = {
    FieldKind.STRING: lambda v: isinstance(v, str),
    # bool is a subclass of int; reject it explicitly
    FieldKind.INTEGER: lambda v: isinstance(v, int) and not isinstance(v, bool),
    FieldKind.BOOLEAN: lambda v: isinstance(v, bool),
    FieldKind.OBJECT: lambda v: isinstance(v, Mapping),
    FieldKind.ARRAY: lambda v: isinstance(v, (list, tuple)),
}


def validate(definition: OperationDefinition, raw_arguments: Optional[Mapping[str, Any]]) -> ValidatedArguments:
    """
    Check raw caller arguments against an operation's declared fields.

    Returns a new mapping holding only declared fields, with defaults applied
    to absent optional ones. Raises ValidationError on the first problem.
    """
    if raw_arguments is None:
        raw_arguments = {}
    if not isinstance(raw_arguments, Mapping):
        raise ValidationError(
            f"Arguments must be an object, got {type(raw_arguments).__name__}",
            ErrorKind.TYPE_MISMATCH,
        )
    return _validate_fields(definition.fields, raw_arguments, prefix="")


def _validate_fields(fields: Tuple[FieldSpec, ...], raw: Mapping[str, Any], prefix: str) -> Dict[str, Any]:
    validated: Dict[str, Any] = {}
    for spec in fields:
        path = f"{prefix}{spec.name}"
        value = raw.get(spec.name)
        if value is None:
            if spec.required:
                raise ValidationError(f"Missing required field '{path}'", ErrorKind.MISSING_FIELD, path)
            if spec.default is not None:
                validated[spec.name] = spec.default
            continue
        validated[spec.name] = _validate_value(spec, value, path)
    return validated


def _validate_value(spec: FieldSpec, value: Any, path: str) -> Any:
    if not _KIND_CHECKS[spec.kind](value):
        raise ValidationError(
            f"Field '{path}' must be of type {spec.kind.value}, got {type(value).__name__}",
            ErrorKind.TYPE_MISMATCH,
            path,
        )

    if spec.allowed_values is not None and value not in spec.allowed_values:
        raise ValidationError(
            f"Field '{path}' must be one of {', '.join(spec.allowed_values)}; got {value!r}",
            ErrorKind.INVALID_ENUM,
            path,
        )

    if spec.minimum is not None and value < spec.minimum:
        raise ValidationError(
            f"Field '{path}' must be at least {spec.minimum}, got {value}",
            ErrorKind.OUT_OF_RANGE,
            path,
        )

    if spec.kind is FieldKind.OBJECT:
        return dict(value)

    if spec.kind is FieldKind.ARRAY:
        elements = []
        for index, element in enumerate(value):
            element_path = f"{path}[{index}]"
            if not isinstance(element, Mapping):
                raise ValidationError(
                    f"Field '{element_path}' must be of type object, got {type(element).__name__}",
                    ErrorKind.TYPE_MISMATCH,
                    element_path,
                )
            elements.append(_validate_fields(spec.items, element, prefix=f"{element_path}."))
        return elements

    return value
