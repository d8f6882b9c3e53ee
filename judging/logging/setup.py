import sys
import logging
from typing import Any

from loguru import logger

from judging.config.settings import settings

SENSITIVE_KEYS = ["key", "token", "password", "passphrase", "secret"]


def _mask(value: str) -> str:
    if len(value) > 8:
        return value[:4] + "****" + value[-4:]
    return "********"


def sensitive_data_filter(record: dict[str, Any]) -> bool:
    """Filter function to mask sensitive data in log records."""
    extra = record.get("extra")
    if isinstance(extra, dict):
        for extra_key, value in extra.items():
            if isinstance(value, str) and any(
                sk in extra_key.lower() for sk in SENSITIVE_KEYS
            ):
                extra[extra_key] = _mask(value)

    # Known secrets from settings never reach a sink verbatim
    secrets = (
        settings.supabase_key,
        settings.supabase_service_key,
        settings.admin_passphrase_sha256,
    )
    for secret in secrets:
        if secret and secret in record["message"]:
            record["message"] = record["message"].replace(secret, "********")

    return True  # Keep the record after filtering/masking


class InterceptHandler(logging.Handler):
    """Routes stdlib logging (httpx, postgrest) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: str | None = None) -> None:
    """Configures Loguru logger based on application settings."""
    level = (level or settings.log_level).upper()
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=False,  # Locals may hold the admin passphrase
        filter=sensitive_data_filter,
    )

    logger.info(f"Logging initialized with level: {level}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.info("Standard logging intercepted.")
