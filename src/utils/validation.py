"""Input re-validation for engine operations.

The presentation layer validates forms too, but every engine operation runs
its input through the pydantic schema again so any caller gets the same
guarantee.
"""

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_fields(
    schema: Type[SchemaT], fields: Union[Mapping[str, Any], BaseModel, None]
) -> SchemaT:
    """Validate raw fields against a schema.

    Args:
        schema: The pydantic request model to validate with.
        fields: A mapping of field values, or an already built model which
            is dumped and validated again.

    Returns:
        The validated schema instance.

    Raises:
        ValidationError: If any field is missing or malformed.
    """
    if isinstance(fields, BaseModel):
        fields = fields.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(fields or {})
    except PydanticValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or "__root__",
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        raise ValidationError(f"Invalid input: {summary}", errors) from exc
