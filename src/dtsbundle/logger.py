import logging
from typing import Any

import structlog

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
    processors=[
        # enrich
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(),
    ],
)

# Ensure the stdlib logger named "dtsbundle" inherits the root logger configuration.
_std_logger = logging.getLogger("dtsbundle")
_std_logger.setLevel(logging.NOTSET)
_std_logger.propagate = True

logger: structlog.BoundLogger = structlog.get_logger("dtsbundle")


class Tracer:
    """
    Verbose-only diagnostics for a single bundle run. Warnings are always
    logged, traces only when the run was started with ``verbose``.
    """

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    def __call__(self, event: str, **fields: Any) -> None:
        if self.verbose:
            logger.info(event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        logger.warning(event, **fields)
