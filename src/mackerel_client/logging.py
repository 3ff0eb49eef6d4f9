from __future__ import annotations

import logging
from typing import IO, Any, Protocol, runtime_checkable

import structlog


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure structlog/standard logging bridge."""

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s")


def bind_context(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Bind contextual fields for downstream logs."""

    logger = structlog.get_logger("mackerel_client")
    return logger.bind(**kwargs)


@runtime_checkable
class Logger(Protocol):
    """Plain trace sink."""

    def printf(self, format: str, *args: Any) -> None: ...


@runtime_checkable
class PrioritizedLogger(Protocol):
    """Leveled trace sink."""

    def tracef(self, format: str, *args: Any) -> None: ...

    def debugf(self, format: str, *args: Any) -> None: ...

    def infof(self, format: str, *args: Any) -> None: ...

    def warningf(self, format: str, *args: Any) -> None: ...

    def errorf(self, format: str, *args: Any) -> None: ...


def _render(format: str, args: tuple[Any, ...]) -> str:
    return format % args if args else format


class StreamLogger:
    """printf-style logger writing prefixed lines to a text stream."""

    def __init__(self, stream: IO[str], prefix: str = "") -> None:
        self._stream = stream
        self._prefix = prefix

    def printf(self, format: str, *args: Any) -> None:
        line = self._prefix + _render(format, args)
        if not line.endswith("\n"):
            line += "\n"
        self._stream.write(line)


class StructlogPrioritizedLogger:
    """Leveled sink backed by a structlog logger."""

    def __init__(self, logger: Any | None = None, event: str = "api_trace") -> None:
        self._logger = logger if logger is not None else structlog.get_logger("mackerel_client")
        self._event = event

    def tracef(self, format: str, *args: Any) -> None:
        self._logger.debug(self._event, dump=_render(format, args))

    def debugf(self, format: str, *args: Any) -> None:
        self._logger.debug(self._event, dump=_render(format, args))

    def infof(self, format: str, *args: Any) -> None:
        self._logger.info(self._event, dump=_render(format, args))

    def warningf(self, format: str, *args: Any) -> None:
        self._logger.warning(self._event, dump=_render(format, args))

    def errorf(self, format: str, *args: Any) -> None:
        self._logger.error(self._event, dump=_render(format, args))


def default_tracef(format: str, *args: Any) -> None:
    """Process-wide fallback sink used when a client has no sinks bound."""
    structlog.get_logger("mackerel_client").info("api_trace", dump=_render(format, args))


def emit_trace(
    logger: Logger | None,
    prioritized_logger: PrioritizedLogger | None,
    format: str,
    *args: Any,
) -> None:
    """Send a trace-level message to the configured sinks.

    Both sinks receive it when both are set; with neither set the default
    sink is used. Sink failures are logged and never propagate.
    """
    targets = []
    if prioritized_logger is not None:
        targets.append(prioritized_logger.tracef)
    if logger is not None:
        targets.append(logger.printf)
    if not targets:
        targets.append(default_tracef)

    for emit in targets:
        try:
            emit(format, *args)
        except Exception as exc:
            structlog.get_logger("mackerel_client").warning(
                "trace_sink_failed", sink=repr(emit), error=str(exc)
            )
