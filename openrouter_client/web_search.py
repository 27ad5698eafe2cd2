from enum import Enum
from typing import Iterable, List, Optional, Union

from .models import Annotation, Plugin, URLCitation, WebSearchOptions
from .routing import ONLINE_SUFFIX

WEB_PLUGIN_ID = "web"
DEFAULT_MAX_RESULTS = 5


class WebSearchEngine(str, Enum):
    NATIVE = "native"   # Provider's built-in search
    EXA = "exa"         # Exa search API
    AUTO = ""           # Let OpenRouter choose


class WebSearchContextSize(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def web_plugin(
    engine: Optional[Union[WebSearchEngine, str]] = None,
    max_results: int = DEFAULT_MAX_RESULTS,
    search_prompt: Optional[str] = None
) -> Plugin:
    """Web search plugin entry for ``plugins=[...]``."""
    engine_value = engine.value if isinstance(engine, WebSearchEngine) else engine
    return Plugin(
        id=WEB_PLUGIN_ID,
        engine=engine_value or None,
        max_results=max_results,
        search_prompt=search_prompt
    )


def web_search_options(context_size: Union[WebSearchContextSize, str]) -> WebSearchOptions:
    return WebSearchOptions(search_context_size=WebSearchContextSize(context_size).value)


def default_search_prompt(date: str) -> str:
    return (
        f"A web search was conducted on `{date}`. Incorporate the following web search "
        "results into your response.\n\n"
        "IMPORTANT: Cite them using markdown links named using the domain of the source.\n"
        "Example: [nytimes.com](https://nytimes.com/some-page)."
    )


def online_model(model: str) -> str:
    """Model slug with web search enabled (``:online`` shortcut)."""
    if model.endswith(ONLINE_SUFFIX):
        return model
    return model + ONLINE_SUFFIX


def parse_annotations(annotations: Optional[Iterable[Annotation]]) -> List[URLCitation]:
    return [
        annotation.url_citation
        for annotation in annotations or []
        if annotation.type == "url_citation" and annotation.url_citation is not None
    ]
