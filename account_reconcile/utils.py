"""
Utility functions for the account matching tool.

This module contains helper functions that are used across the system but
are not directly related to matching accounts.
"""

import os
import pathlib
import logging

logger = logging.getLogger(__name__)

def setup_logging(debug=False, log_level='info'):
    """Configure logging for the application."""
    # Determine log level
    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Get log file path from environment or use default
    log_file = os.getenv('LOG_FILE', 'debug.log')

    # Create log directory if needed
    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    # Set up logging to file and console
    logging.basicConfig(
        level=level,
        format=format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )

    return log_file

def resolve_output_path(output_path, default_name):
    """
    Resolve where an output file should be written.

    Args:
        output_path (str or pathlib.Path): Output file or directory
        default_name (str): File name to use when output_path is a directory

    Returns:
        pathlib.Path: Output file path

    Side Effects:
        - Creates the parent directory if it doesn't exist
    """
    output_path = pathlib.Path(output_path)

    # Treat existing directories and suffix-less paths as directories
    if output_path.is_dir() or not output_path.suffix:
        output_path = output_path / default_name

    output_path.parent.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Resolved output path: {output_path}")
    return output_path
