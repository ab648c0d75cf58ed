"""Centralized logging configuration for chunkwise."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "chunkwise"


def setup_logging(
	level: Optional[str] = None,
	log_dir: Optional[Path | str] = None,
) -> logging.Logger:
	"""
	Set up the package logger with console and file handlers.

	Args:
		level: Console log level (DEBUG, INFO, WARNING, ERROR). Defaults to
			the CHUNKWISE_LOG_LEVEL env var, then WARNING.
		log_dir: Directory for the rotating log file; no file log if omitted

	Returns:
		Configured logger
	"""
	level = level or os.getenv("CHUNKWISE_LOG_LEVEL", "WARNING")
	log_level = getattr(logging, level.upper(), logging.WARNING)

	logger = logging.getLogger(LOGGER_NAME)
	logger.setLevel(logging.DEBUG)

	# Avoid duplicate handlers
	if logger.handlers:
		return logger

	detailed_formatter = logging.Formatter(
		"%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	)
	simple_formatter = logging.Formatter("[%(levelname)s] %(message)s")

	# Console handler on stderr so command output stays clean
	console_handler = logging.StreamHandler(sys.stderr)
	console_handler.setLevel(log_level)
	console_handler.setFormatter(simple_formatter)
	logger.addHandler(console_handler)

	if log_dir:
		log_path = Path(log_dir)
		log_path.mkdir(parents=True, exist_ok=True)

		file_handler = RotatingFileHandler(
			log_path / f"{LOGGER_NAME}.log",
			maxBytes=5 * 1024 * 1024,  # 5 MB
			backupCount=3,
			encoding="utf-8",
		)
		file_handler.setLevel(logging.DEBUG)  # File gets all logs
		file_handler.setFormatter(detailed_formatter)
		logger.addHandler(file_handler)

	return logger

