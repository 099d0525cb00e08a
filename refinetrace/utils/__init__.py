"""Shared utilities for refinetrace."""

from .logging_setup import get_logger, log_operation, setup_logging

__all__ = ['get_logger', 'log_operation', 'setup_logging']
