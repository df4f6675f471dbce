# File: secreq_api/core/logging_config.py
import logging
import sys
from typing import Any, Dict, List, Optional

import structlog
from structlog.types import EventDict, Processor

from secreq_api.core.config import Settings, settings as default_settings

# Loggers whose per-request chatter duplicates the request middleware's own lines.
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "hpack", "h2")


def service_context_processor(app_settings: Settings) -> Processor:
    """Stamps every event, including foreign stdlib records, with service identity."""
    context = {
        "service": app_settings.SERVICE_NAME,
        "version": app_settings.SERVICE_VERSION,
        "environment": app_settings.ENVIRONMENT,
    }

    def add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_service_context


def drop_color_message_key(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # uvicorn duplicates its message with ANSI codes under this key
    event_dict.pop("color_message", None)
    return event_dict


def build_shared_processors(app_settings: Settings) -> List[Processor]:
    processors: List[Processor] = [
        # carries request_id bound by the request middleware
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        drop_color_message_key,
        service_context_processor(app_settings),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if app_settings.LOG_LEVEL == "DEBUG":
        processors.append(structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ))
    return processors


def build_renderer(app_settings: Settings) -> Processor:
    if app_settings.LOG_FORMAT == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(app_settings: Optional[Settings] = None) -> None:
    """Routes structlog and stdlib logging through one stdout handler."""
    app_settings = app_settings or default_settings
    shared_processors = build_shared_processors(app_settings)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    render_processors: List[Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if app_settings.LOG_FORMAT == "json":
        render_processors.append(structlog.processors.format_exc_info)
    render_processors.append(build_renderer(app_settings))

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=render_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # replace rather than stack handlers when called again (reload, tests)
    for existing in list(root_logger.handlers):
        if isinstance(existing.formatter, structlog.stdlib.ProcessorFormatter):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(app_settings.LOG_LEVEL)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    startup_context: Dict[str, Any] = {"log_level": app_settings.LOG_LEVEL, "log_format": app_settings.LOG_FORMAT}
    structlog.get_logger("secreq_api").info("Logging configured", **startup_context)
