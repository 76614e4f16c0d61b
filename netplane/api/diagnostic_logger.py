#!/usr/bin/env python3
"""
Diagnostic Logger for the netplane reconciler

Configures process logging and keeps a record of the faults raised while
reconciling resources, so a pass can be inspected after the fact.
"""

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger("diagnostic")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None, log_dir: Optional[str] = None):
    """Send logs to stdout, and to LOG_DIR/netplane.log when a log dir is set."""
    level = level or os.getenv("LOG_LEVEL", "INFO")
    log_dir = log_dir or os.getenv("LOG_DIR")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, "netplane.log")))

    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # botocore is noisy at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)


class DiagnosticLogger:
    """Collects the faults raised during reconciliation passes."""

    def __init__(self):
        self.start_time = datetime.now()
        self.errors = []

    def log_error(self, error_msg: str, context: Optional[Dict[str, Any]] = None):
        """Log an error with context."""
        self.errors.append({
            'timestamp': datetime.now().isoformat(),
            'error': error_msg,
            'context': context or {}
        })
        logger.error(f"ERROR: {error_msg}")
        if context:
            logger.error(f"Context: {json.dumps(context, indent=2)}")
