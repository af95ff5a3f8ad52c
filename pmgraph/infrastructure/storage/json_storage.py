"""JSON file storage with Result-based error handling.

Thin wrapper around file I/O for JSON documents (config files, replay
scripts), returning Result types instead of raising exceptions. The
graph state itself is never written here.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pmgraph.domain.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class JsonStorage:
    """Low-level JSON file I/O.

    Example:
        storage = JsonStorage()
        result = storage.load_json(Path("script.json"))
        if isinstance(result, Ok):
            steps = result.value
        else:
            print(f"Error: {result.error}")
    """

    def load_json(self, path: Path) -> Result[Any, str]:
        """Load a JSON document from a file.

        Args:
            path: Path to the JSON file to read.

        Returns:
            Ok(data) if successful, Err(str) with error message if failed.
        """
        try:
            if not path.exists():
                return Err(f"File not found: {path}")

            content = path.read_text(encoding="utf-8")
            return Ok(json.loads(content))

        except json.JSONDecodeError as e:
            return Err(f"Invalid JSON in {path}: {e}")
        except PermissionError:
            return Err(f"Permission denied reading {path}")
        except OSError as e:
            return Err(f"Error reading {path}: {e}")

    def save_json(
        self,
        path: Path,
        data: Any,
        indent: int = 2,
    ) -> Result[None, str]:
        """Write a JSON document, creating parent directories as needed."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=indent), encoding="utf-8")
            logger.debug(f"Wrote {path}")
            return Ok(None)

        except TypeError as e:
            return Err(f"Data not JSON serializable: {e}")
        except PermissionError:
            return Err(f"Permission denied writing {path}")
        except OSError as e:
            return Err(f"Error writing {path}: {e}")
