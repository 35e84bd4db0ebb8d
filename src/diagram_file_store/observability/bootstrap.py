"""Wire settings into logging and tracing for a host process."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from diagram_file_store.config import get_settings
from diagram_file_store.observability.logging import configure_logging
from diagram_file_store.observability.tracing import init_tracing


if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider

    from diagram_file_store.config import Settings

logger = logging.getLogger(__name__)


def init_observability(
    settings: Settings | None = None,
    *,
    logger_levels: dict[str, str] | None = None,
) -> TracerProvider:
    """Configure logging and tracing from ``settings`` (environment by default).

    Call once at process start, before the first store operation.
    """
    settings = settings or get_settings()

    configure_logging(
        level=settings.log_level,
        json_output=settings.log_json,
        logger_levels=logger_levels,
    )
    provider = init_tracing(service_name=settings.service_name)
    logger.debug("Observability initialized (level=%s, json=%s)", settings.log_level, settings.log_json)
    return provider
