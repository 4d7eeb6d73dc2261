"""Project raw backend records into declared output shapes."""

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from erp_tools.infra.error_handler import BackendServiceError

ModelT = TypeVar("ModelT", bound=BaseModel)


def is_absent(value: Any) -> bool:
    """None and the empty string both mean "not set" on backend records."""
    return value is None or (isinstance(value, str) and value == "")


def project(record: Mapping[str, Any], output_model: Type[ModelT], **fallbacks: Any) -> ModelT:
    """
    Copy the declared fields of output_model out of a backend record.

    Each field is looked up by its wire name (alias). Absent values are left
    unset, so they drop out of the dumped result instead of appearing as null.
    No coercion happens beyond what the field type declares.

    Args:
        record: Raw backend record
        output_model: Declared output shape
        **fallbacks: Values (by Python field name) for fields the record lacks

    Returns:
        Instance of output_model

    Raises:
        BackendServiceError: The record cannot satisfy the declared shape
    """
    values = {}
    for name, field in output_model.model_fields.items():
        value = record.get(field.alias or name)
        if is_absent(value):
            value = fallbacks.get(name)
        if not is_absent(value):
            values[name] = value

    try:
        return output_model.model_validate(values)
    except PydanticValidationError as e:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        raise BackendServiceError(
            f"Backend record does not match {output_model.__name__}: {problems}"
        ) from e


def dump(model: BaseModel) -> dict:
    """Wire form of an output model; unset fields are omitted."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
