"""Structured logging — structlog 기반 설정.

모듈은 stdlib logging.getLogger(__name__)만 사용하고,
프로세스 진입점(FastAPI lifespan, CLI)에서 한 번 setup_logging() 호출.

Usage:
    from trade_mirror.infra.observability import setup_logging

    setup_logging(service_name="sync-cli", log_level="DEBUG", json_output=False)
"""

import logging
import sys

import structlog

# 요청 URL(서명 포함)을 INFO로 찍는 라이브러리 로거
_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    service_name: str = "trade-mirror",
    *,
    log_level: str = "INFO",
    json_output: bool = True,
) -> None:
    """전역 structlog + stdlib 로깅 설정.

    Args:
        service_name: 로그에 포함할 서비스 이름
        log_level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR)
        json_output: True면 JSON 형식, False면 사람이 읽기 쉬운 형식
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level_int,
    )
    logging.getLogger().setLevel(log_level_int)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    for handler in logging.getLogger().handlers:
        handler.setFormatter(formatter)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level_int, logging.WARNING))

    structlog.contextvars.bind_contextvars(service=service_name)
