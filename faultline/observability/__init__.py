"""Logging setup for applications using faultline.

Log events carry structlog contextvars and render as JSON, for structlog and
stdlib loggers alike.
"""
