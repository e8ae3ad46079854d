"""
Signature persistence.

Stores the orchestrator's signature map in a JSON file so a restarted
process does not treat every instrument as first-seen. The file maps each
symbol to ``{"count": n, "type": "X"|"O"}``.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict

from ..point_figure.signature import Signature

logger = logging.getLogger(__name__)


class SignatureStore:
    """
    Persists signatures to a JSON file.

    Loading never raises: a missing file yields an empty map and a corrupt
    file or entry is logged and skipped, since losing signatures only costs
    one silent first-observation cycle.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Dict[str, Signature]:
        if not self.path.exists():
            logger.info(f"No signature file at {self.path}; starting fresh")
            return {}

        try:
            with open(self.path, "r") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable signature file {self.path}: {e}")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring signature file {self.path}: expected a JSON object")
            return {}

        signatures: Dict[str, Signature] = {}
        for symbol, data in raw.items():
            try:
                signatures[symbol] = Signature.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping invalid signature for {symbol}: {e}")

        logger.info(f"Loaded {len(signatures)} signatures from {self.path}")
        return signatures

    def save(self, signatures: Dict[str, Signature]) -> None:
        """Write the map atomically (temp file + rename)."""
        data = {symbol: sig.to_dict() for symbol, sig in sorted(signatures.items())}
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".signatures-", suffix=".json")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.debug(f"Saved {len(data)} signatures to {self.path}")
