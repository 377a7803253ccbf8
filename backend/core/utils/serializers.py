# ------------------------------ IMPORTS ------------------------------
from typing import Any, Iterable, Type
from pydantic import BaseModel

# ------------------------------ SERIALIZERS ------------------------------

def serialize_model(item: Any, schema: Type[BaseModel]) -> dict[str, Any]:
    """Validate an ORM object through its output schema and dump it as JSON-ready data."""
    return schema.model_validate(item).model_dump(mode="json")

def serialize_models(items: Iterable[Any], schema: Type[BaseModel]) -> list[dict[str, Any]]:
    return [serialize_model(item, schema) for item in items]

def paginate_response(
    items: Iterable[Any],
    total: int,
    schema: Type[BaseModel],
    limit: int,
    offset: int,
    items_key: str = "items"
) -> dict[str, Any]:
    """Wrap a page of results with its pagination metadata."""
    return {
        items_key: serialize_models(items, schema),
        "total": total,
        "limit": limit,
        "offset": offset,
        "has_more": offset + limit < total,
    }

# ------------------------------ END OF FILE ------------------------------
