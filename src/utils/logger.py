import sys
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

REDACTED = "***"


def _redact(secrets: list[str]):
    def patcher(record) -> None:
        message = record["message"]
        for secret in secrets:
            if secret in message:
                message = message.replace(secret, REDACTED)
        record["message"] = message

    return patcher


def setup_logger(
    *,
    level: str = "INFO",
    json_logs: bool = False,
    log_dir: str = "logs",
    redact: Iterable[str] = (),
) -> None:
    """Configure loguru for the launcher.

    Console at ``level``; the file sink always keeps DEBUG so a failed launch
    can be traced by mint or signature afterwards. Any value in ``redact``
    (API keys, JWTs) is masked before a record reaches a sink.
    """
    logger.remove()
    logger.configure(patcher=_redact([s for s in redact if s]))

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=level.upper())
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan> - "
                "<level>{message}</level>"
            ),
            level=level.upper(),
            colorize=True,
        )

    logger.add(
        Path(log_dir) / "launcher_{time:YYYY-MM-DD}.log",
        rotation="50 MB",
        retention="14 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
    )
