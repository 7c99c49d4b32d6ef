"""Environment-driven configuration.

Values are read from the process environment after loading a ``.env`` file
from the working directory, if one exists:

``POOLSETTLE_RULESET``
    Path to a JSON rule-set file (see :meth:`RuleSet.from_mapping`).
``DB_URL``
    Database URL used by :mod:`poolsettle.db.engine`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from .errors import ConfigurationError
from .rules import RuleSet, ScoringRules

logger = logging.getLogger(__name__)

RULESET_ENV_VAR = "POOLSETTLE_RULESET"

# Tiers of the round-based score pool.
DEFAULT_RULESET = RuleSet(
    version="score-pool-v1",
    scoring=ScoringRules(exact=5, correct_difference=3, correct_outcome=1, choice=1),
)


def load_ruleset(path: Optional[Union[str, Path]] = None) -> RuleSet:
    """Load the active rule set.

    Parameters
    ----------
    path : Optional[str | Path], default: None
        JSON file to read. When omitted ``POOLSETTLE_RULESET`` is consulted,
        and :data:`DEFAULT_RULESET` is returned if it is unset.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or does not describe a valid rule set.
    """

    load_dotenv()
    location = path or os.getenv(RULESET_ENV_VAR)
    if not location:
        return DEFAULT_RULESET

    file_path = Path(location).expanduser()
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot load rule set from {file_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Rule set file {file_path} must contain a JSON object")

    ruleset = RuleSet.from_mapping(data)
    logger.info("Loaded rule set %s from %s", ruleset.version, file_path)
    return ruleset


__all__ = ["DEFAULT_RULESET", "RULESET_ENV_VAR", "load_ruleset"]
