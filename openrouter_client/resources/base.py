from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..dispatcher import Dispatcher
from ..errors import ValidationError

R = TypeVar('R', bound=BaseModel)


def build_request(model: Type[R], fields: Dict[str, Any]) -> R:
    """Validate request fields locally, surfacing failures as ValidationError."""
    try:
        return model.model_validate(fields)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get('loc', ())) or model.__name__
        raise ValidationError(field, first.get('msg', str(e))) from e


def require(value: Any, field: str, reason: str = "is required"):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field, reason)


class Resource:
    """Group of endpoints sharing one Dispatcher."""

    def __init__(self, dispatcher: Dispatcher):
        self._dispatcher = dispatcher

    @property
    def config(self):
        return self._dispatcher.config
