"""
Logging Configuration for GamerBot

Provides centralized logging setup with structured logging, optional file
rotation and component-specific log levels.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Optional
import structlog


LOGGER_PREFIX = 'gamerbot'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
SIZE_UNITS = {'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}


class GamerBotLogger:
    """
    Centralized logging configuration for GamerBot
    """

    def __init__(self, config: Dict):
        self.config = config
        self.loggers: Dict[str, logging.Logger] = {}
        self._setup_logging()

    def _setup_logging(self):
        """Set up logging configuration"""
        log_config = self.config.get('logging', {})
        level = getattr(logging, log_config.get('level', 'INFO').upper())

        # Dispatcher error events are rendered as one JSON object per line
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="ISO"),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        handlers = []
        if log_config.get('file'):
            log_path = Path(log_config['file'])
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=self._parse_size(log_config.get('max_size', '10MB')),
                backupCount=log_config.get('backup_count', 5),
                encoding='utf-8'
            ))
        if log_config.get('console', True):
            handlers.append(logging.StreamHandler(sys.stdout))

        formatter = logging.Formatter(LOG_FORMAT)
        for handler in handlers:
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)

        # Keys are dotted names below gamerbot, e.g. irc or services.bot.dispatcher
        for component, component_level in log_config.get('components', {}).items():
            logging.getLogger(f'{LOGGER_PREFIX}.{component}').setLevel(
                getattr(logging, component_level.upper())
            )

        logging.getLogger('asyncio').setLevel(logging.WARNING)

    def _parse_size(self, size_str) -> int:
        """Parse size string like '10MB' to bytes"""
        size_str = str(size_str).upper()
        for suffix, multiplier in SIZE_UNITS.items():
            if size_str.endswith(suffix):
                return int(size_str[:-len(suffix)]) * multiplier
        return int(size_str)

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger for a specific component"""
        if name not in self.loggers:
            full_name = name if name.startswith(LOGGER_PREFIX) else f'{LOGGER_PREFIX}.{name}'
            self.loggers[name] = logging.getLogger(full_name)

        return self.loggers[name]

    def get_structured_logger(self, name: str) -> structlog.stdlib.BoundLogger:
        """Get a structured logger for a specific component"""
        return structlog.get_logger(f'{LOGGER_PREFIX}.{name}')


# Global logger instance
_logger_instance: Optional[GamerBotLogger] = None


def initialize_logging(config: Dict) -> GamerBotLogger:
    """Initialize the global logging system"""
    global _logger_instance
    _logger_instance = GamerBotLogger(config)
    return _logger_instance


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance"""
    if _logger_instance is None:
        # Fallback to basic logging if not initialized
        logging.basicConfig(
            level=logging.INFO,
            format=LOG_FORMAT
        )
        return logging.getLogger(f'{LOGGER_PREFIX}.{name}')

    return _logger_instance.get_logger(name)


def get_structured_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    if _logger_instance is None:
        return structlog.get_logger(f'{LOGGER_PREFIX}.{name}')

    return _logger_instance.get_structured_logger(name)
