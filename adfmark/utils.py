"""
Common utilities for adfmark.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def jsonDumps(data: Any, compact: Optional[bool] = None, **kwargs) -> str:
    dumpKwargs = {
        "ensure_ascii": False,
        "default": str,
        "sort_keys": True,
    }

    if compact is None:
        # If indent is passed, then user want pretty-printed JSON,
        #  no need to use compact separators
        compact = "indent" not in kwargs

    if compact:
        dumpKwargs["separators"] = (",", ":")
    dumpKwargs.update(kwargs)
    return json.dumps(data, **dumpKwargs)


def load_dotenv(path: str = ".env", populateEnv: bool = True) -> Dict[str, str]:
    """
    Simple dotenv file loader.
    Just read file line by line and put key-value pairs into dictionary.

    Args:
        path: Path to .env file (default ".env")
        populateEnv: Whether to populate environment variables (default True).
            Variables already present in the environment are kept.

    Returns:
        Dictionary of key-value pairs from .env file, empty if file is missing
    """
    ret: Dict[str, str] = {}
    if not Path(path).is_file():
        logger.debug(f"No dotenv file at {path}")
        return ret

    with open(path, "rt", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if sep:
                ret[key.strip()] = value.strip().strip('"')

    if populateEnv:
        for k, v in ret.items():
            os.environ.setdefault(k, v)
    return ret
