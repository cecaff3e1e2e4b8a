"""
Logging utilities for the task manager.
"""
import logging
import re

from sqlalchemy import event
from sqlalchemy.engine import Engine

SQL_LOGGER_NAME = "taskmanager-sql"

_WHITESPACE = re.compile(r"\s+")


def setup_logging(service_name: str, log_level: str = "INFO") -> logging.Logger:
    """
    Setup logging configuration for a component.

    Args:
        service_name: Name used for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, log_level.upper()))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            f'%(asctime)s - {service_name} - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def format_statement(statement: str, pretty: bool) -> str:
    """Keep the statement layout when pretty, otherwise fold it onto one line."""
    if pretty:
        return statement.strip()
    return _WHITESPACE.sub(" ", statement).strip()


def attach_sql_logging(engine: Engine, format_sql: bool = True) -> logging.Logger:
    """
    Log every statement executed on the engine.

    Args:
        engine: Engine to instrument
        format_sql: Keep multi-line statement text instead of a single line

    Returns:
        The SQL logger
    """
    sql_logger = setup_logging(SQL_LOGGER_NAME)

    @event.listens_for(engine, "before_cursor_execute")
    def _log_statement(conn, cursor, statement, parameters, context, executemany):
        sql_logger.info("%s | params=%r", format_statement(statement, format_sql), parameters)

    return sql_logger
