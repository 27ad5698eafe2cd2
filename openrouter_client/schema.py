"""
Builders for tool definitions and structured-output formats.

    response_format = json_schema_format("margin_observation", MarginObservation)
    tools = [function_tool("get_weather", "Current weather", {...})]

Schemas may be plain JSON-schema dicts or pydantic model classes.
"""

from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel

from .models import FunctionDefinition, JSONSchema, ResponseFormat, Tool

SchemaLike = Union[Dict[str, Any], Type[BaseModel]]


def schema_from_model(model: Type[BaseModel]) -> Dict[str, Any]:
    return model.model_json_schema()


def _as_schema(schema: Optional[SchemaLike]) -> Dict[str, Any]:
    if schema is None:
        return {"type": "object", "properties": {}}
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return schema_from_model(schema)
    return dict(schema)


def function_tool(
    name: str,
    description: Optional[str] = None,
    parameters: Optional[SchemaLike] = None
) -> Tool:
    return Tool(
        type="function",
        function=FunctionDefinition(
            name=name,
            description=description,
            parameters=_as_schema(parameters)
        )
    )


def json_schema_format(name: str, schema: SchemaLike, strict: bool = True) -> ResponseFormat:
    return ResponseFormat(
        type="json_schema",
        json_schema=JSONSchema(name=name, strict=strict, schema=_as_schema(schema))
    )


def json_object_format() -> ResponseFormat:
    """Free-form JSON mode (no schema enforced)."""
    return ResponseFormat(type="json_object")


def tool_choice(name: str) -> Dict[str, Any]:
    """Force the model to call the named function."""
    return {"type": "function", "function": {"name": name}}
