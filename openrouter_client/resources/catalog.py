from typing import Optional
from urllib.parse import quote

from ..models import ModelEndpointsResponse, ModelsResponse, ProvidersResponse
from .base import Resource, require


class ModelsResource(Resource):
    def list(self, category: Optional[str] = None) -> ModelsResponse:
        """List available models, optionally filtered by category (e.g. "programming")."""
        return self._dispatcher.dispatch(
            "GET",
            "/models",
            params={"category": category},
            response_model=ModelsResponse
        )

    def endpoints(self, author: str, slug: str) -> ModelEndpointsResponse:
        """List the provider endpoints serving ``author/slug``."""
        require(author, "author")
        require(slug, "slug")
        return self._dispatcher.dispatch(
            "GET",
            f"/models/{quote(author, safe='')}/{quote(slug, safe='')}/endpoints",
            response_model=ModelEndpointsResponse
        )


class ProvidersResource(Resource):
    def list(self) -> ProvidersResponse:
        return self._dispatcher.dispatch("GET", "/providers", response_model=ProvidersResponse)
