import logging
import os
import sys
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


def validate_ops_rules(rules: Rules, base_dir: Path, data_dir: Path | None = None) -> None:
    """
    Validate operational requirements before startup.

    Exits the process when a requirement is not met.
    """
    ops = rules.ops

    # 1. Data dir must exist (created if missing) and be writable
    if ops.data_dir_required:
        target = data_dir if data_dir is not None else base_dir / "data"
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.critical("Data directory %s is not usable: %s", target, e)
            sys.exit(1)
        if not os.access(target, os.W_OK):
            logger.critical("Data directory %s is not writable", target)
            sys.exit(1)

    # 2. Required env
    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    logger.info("Configuration validated.")
