"""
Model-name shortcuts for provider routing preferences.

OpenRouter accepts a few suffixes on model slugs. ``:nitro`` and ``:floor`` are
rewritten client-side into ``provider.sort`` so they compose with any other
provider preferences on the request; ``:online`` and other variants are
passed through untouched. The gateway makes every routing decision.
"""

from typing import Optional, Tuple

from .models import ProviderPreferences

NITRO_SUFFIX = ":nitro"
FLOOR_SUFFIX = ":floor"
ONLINE_SUFFIX = ":online"

SORT_BY_SUFFIX = {
    NITRO_SUFFIX: "throughput",
    FLOOR_SUFFIX: "price",
}


def split_model_suffix(model: str) -> Tuple[str, Optional[str]]:
    """Return ``(base_model, sort)`` for a model with a sort suffix, else ``(model, None)``."""
    for suffix, sort in SORT_BY_SUFFIX.items():
        if model.endswith(suffix):
            return model[:-len(suffix)], sort
    return model, None


def apply_model_suffix(
    model: str,
    provider: Optional[ProviderPreferences]
) -> Tuple[str, Optional[ProviderPreferences]]:
    base_model, sort = split_model_suffix(model)
    if sort is None:
        return model, provider

    if provider is None:
        return base_model, ProviderPreferences(sort=sort)

    # The suffix overrides any sort already on the request
    return base_model, provider.model_copy(update={"sort": sort})
