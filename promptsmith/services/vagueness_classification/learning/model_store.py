"""
JSON file persistence for trained vagueness models.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ModelStore:
    """Reads and atomically writes a model blob at a fixed path"""

    def __init__(self, path: str):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, blob: Dict[str, Any]):
        """
        Write the blob through a temp file and os.replace.

        Readers never observe a partially written file.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".model-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(blob, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.info(f"Saved vagueness model to {self.path}")

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored blob, or None when no model has been saved"""
        if not self.exists():
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def delete(self) -> bool:
        if not self.exists():
            return False
        self.path.unlink()
        logger.info(f"Deleted vagueness model at {self.path}")
        return True
