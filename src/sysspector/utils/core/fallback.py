# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Priority-ordered provider chains.

Several values can be read from more than one source (temperature sensors,
bluetooth state, WiFi details, CPU model). Each source is a provider
function; providers are tried in order and the first one that returns data
wins. A provider that raises is logged and treated as having no data.
"""

import logging
from typing import Any, Callable, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Provider = Callable[[], Any]


def _provider_name(provider: Provider) -> str:
    return getattr(provider, "__name__", repr(provider))


def first_available(providers: Sequence[Provider], default: Any = None) -> Any:
    """
    Return the first non-empty value produced by a list of providers.

    Args:
        providers: Zero-argument callables in priority order
        default: Value returned when every provider comes back empty

    Returns:
        The first truthy provider result, or the default
    """
    value, _ = first_available_with_source(providers, default)
    return value


def first_available_with_source(
    providers: Sequence[Provider], default: Any = None
) -> Tuple[Any, Optional[str]]:
    """
    Same as first_available but also report which provider answered.

    Args:
        providers: Zero-argument callables in priority order
        default: Value returned when every provider comes back empty

    Returns:
        Tuple of (value, provider name) or (default, None)
    """
    for provider in providers:
        name = _provider_name(provider)
        try:
            value = provider()
        except Exception as e:
            logger.debug(f"Provider {name} failed: {e}")
            continue
        if value:
            logger.debug(f"Provider {name} returned data")
            return value, name
        logger.debug(f"Provider {name} returned no data")
    return default, None
