import os
import re
import sys

from loguru import logger

# httpx errors echo the request URL, which carries the Helius key as a query param
_API_KEY_RE = re.compile(r"(api-key=)[^&\s\"']+", re.IGNORECASE)


def _mask_secrets(record: dict) -> bool:
    record["message"] = _API_KEY_RE.sub(r"\1***", record["message"])
    return True


def setup_logger(
    *,
    json_logs: bool = False,
    level: str = "INFO",
    log_dir: str | None = "logs",
) -> None:
    """Route analyzer logs to stderr so stdout stays clean for the report.

    ``level`` applies to the console only. Settings already read LOG_LEVEL from
    the environment, so callers pass the resolved value. With ``log_dir`` set a
    DEBUG file sink is added as well; pass None to disable it.
    """
    console_level = level.upper()
    logger.remove()

    if json_logs:
        logger.add(sys.stderr, serialize=True, level=console_level, filter=_mask_secrets)
    else:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan> - "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
            filter=_mask_secrets,
        )

    if log_dir:
        logger.add(
            os.path.join(log_dir, "jitterhands_{time:YYYY-MM-DD}.log"),
            rotation="20 MB",
            retention="3 days",
            compression="gz",
            level="DEBUG",
            serialize=json_logs,
            filter=_mask_secrets,
        )
