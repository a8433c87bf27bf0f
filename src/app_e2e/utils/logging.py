"""Secure logging configuration for app-e2e.

Provides logging setup with secret masking. Passwords, tokens and
bearer credentials that flow through the command log are replaced
with [MASKED].
"""

import logging
import re


class SecretMaskingFilter(logging.Filter):
    """Logging filter that masks credential values.

    Test accounts use throwaway credentials, but command logs end up in
    CI artifacts, so they are masked all the same.
    """

    SECRET_PATTERNS = [
        # password=VALUE, token: VALUE, refreshToken=VALUE, password='VALUE'
        re.compile(r"((?:password|token|refreshToken|refresh_token)[=:]\s*[\"']?)([^\s;,}\"']+)", re.IGNORECASE),
        # {"password": "value"} and {'token': 'value'}
        re.compile(
            r"([\"'](?:password|token|refreshToken|refresh_token)[\"']\s*:\s*[\"'])([^\"']+)([\"'])",
            re.IGNORECASE,
        ),
        # Authorization: Bearer VALUE
        re.compile(r"(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and mask secrets in log records.

        Args:
            record: Log record to process

        Returns:
            Always True (record is always passed through, just modified)
        """
        if record.msg:
            record.msg = self._mask(str(record.msg))
        if record.args:
            new_args: list[object] = []
            for arg in record.args if isinstance(record.args, tuple) else (record.args,):
                if isinstance(arg, str):
                    new_args.append(self._mask(arg))
                else:
                    new_args.append(arg)
            record.args = tuple(new_args)
        return True

    def _mask(self, text: str) -> str:
        """Mask all secret values in text.

        Args:
            text: Text potentially containing secrets

        Returns:
            Text with secret values replaced by [MASKED]
        """
        result = text
        for pattern in self.SECRET_PATTERNS:

            def mask_match(m: re.Match[str]) -> str:
                suffix = m.group(3) if len(m.groups()) > 2 else ""
                return m.group(1) + "[MASKED]" + suffix

            result = pattern.sub(mask_match, result)
        return result


def setup_logging(level: int = logging.INFO, name: str | None = None) -> logging.Logger:
    """Set up logging with secret masking.

    Args:
        level: Logging level (default: INFO)
        name: Logger name (default: "app_e2e")

    Returns:
        Configured logger instance
    """
    logger_name = name or "app_e2e"
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    handler.addFilter(SecretMaskingFilter())

    logger.addHandler(handler)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the app_e2e namespace.

    Args:
        name: Logger name suffix (e.g., "commands" for "app_e2e.commands")

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"app_e2e.{name}")
    return logging.getLogger("app_e2e")
