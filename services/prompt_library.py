import json
import logging
from pathlib import Path
from typing import Any

from errors import PromptLibraryUnavailable

logger = logging.getLogger(__name__)


def load_prompt_library(path: Path) -> Any:
    """Read the static prompt library served to the front end."""
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error(f"Could not load prompt library from {path}: {exc}")
        raise PromptLibraryUnavailable(str(path), str(exc)) from exc
