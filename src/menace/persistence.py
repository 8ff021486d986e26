"""
Matchbox table persistence.

File format (JSON):
    {
      "<state key>": [{"action": <cell>, "count": <beads>}, ...],
      ...
    }

Only the table is stored; the in-progress record never leaves the process.
"""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Dict, List

from .engine import Bead
from .errors import MalformedTable, PersistenceError, TableNotFound

logger = logging.getLogger(__name__)

NUM_CELLS = 9


def table_to_document(matchboxes: Dict[str, List[Bead]]) -> Dict[str, List[Dict[str, int]]]:
    """Convert a table to its JSON-ready document form."""
    return {
        state: [{"action": b.action, "count": b.count} for b in beads]
        for state, beads in matchboxes.items()
    }


def _is_int(value) -> bool:
    # bool is a subclass of int but never a valid action or count
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_entry(state, items) -> List[Bead]:
    if not isinstance(state, str):
        raise MalformedTable(f"State key {state!r} is not a string")
    if not isinstance(items, list):
        raise MalformedTable(f"State {state!r}: expected a list of beads, got {type(items).__name__}")

    beads = []
    seen = set()
    for item in items:
        if not isinstance(item, dict):
            raise MalformedTable(f"State {state!r}: bead {item!r} is not an object")
        if set(item) != {"action", "count"}:
            raise MalformedTable(f"State {state!r}: bead {item!r} must have exactly 'action' and 'count'")

        action, count = item["action"], item["count"]
        if not _is_int(action) or not _is_int(count):
            raise MalformedTable(f"State {state!r}: bead {item!r} has non-integer fields")
        if not 0 <= action < NUM_CELLS:
            raise MalformedTable(f"State {state!r}: action {action} is not a board cell")
        if count < 0:
            raise MalformedTable(f"State {state!r}: negative count {count}")
        if action in seen:
            raise MalformedTable(f"State {state!r}: duplicate action {action}")

        seen.add(action)
        beads.append(Bead(action, count))
    return beads


def document_to_table(document) -> Dict[str, List[Bead]]:
    """
    Validate and convert a parsed document back into a table.

    Raises:
        MalformedTable: wrong shape, missing fields, wrong types or negative counts
    """
    if not isinstance(document, dict):
        raise MalformedTable(f"Expected a JSON object at top level, got {type(document).__name__}")
    return {state: _parse_entry(state, items) for state, items in document.items()}


def _file_mode(path: Path) -> int:
    """Permissions for a saved table: keep an existing file's mode, else honour the umask."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def save_table(path, matchboxes: Dict[str, List[Bead]]):
    """
    Write the table to path atomically.

    The document is written to a temporary file next to the target and moved
    into place, so readers see either the old file or the complete new one.
    """
    path = Path(path)
    document = table_to_document(matchboxes)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        raise PersistenceError(f"Failed to create file: {path} ({e})") from e

    try:
        with os.fdopen(fd, "w") as f:
            json.dump(document, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, _file_mode(path))
        os.replace(tmp_name, path)
    except (OSError, TypeError, ValueError) as e:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise PersistenceError(f"Failed to write to file: {path} ({e})") from e

    logger.info("Saved %d matchboxes to %s", len(matchboxes), path)


def load_table(path) -> Dict[str, List[Bead]]:
    """
    Read a table written by save_table.

    Raises:
        TableNotFound: path does not exist
        PersistenceError: path exists but cannot be read
        MalformedTable: content is not a valid table document
    """
    path = Path(path)
    try:
        with open(path) as f:
            text = f.read()
    except FileNotFoundError as e:
        raise TableNotFound(f"Unable to read file: {path}") from e
    except OSError as e:
        raise PersistenceError(f"Unable to read file: {path} ({e})") from e
    except UnicodeDecodeError as e:
        raise MalformedTable(f"Failed to load JSON file: {path} ({e})") from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedTable(f"Failed to load JSON file: {path} ({e})") from e

    matchboxes = document_to_table(document)
    logger.info("Loaded %d matchboxes from %s", len(matchboxes), path)
    return matchboxes
