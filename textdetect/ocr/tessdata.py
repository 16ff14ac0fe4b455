from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import pytesseract

from ..config import Settings

logger = logging.getLogger("textdetect")

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


def _candidates(settings: Settings) -> Iterator[Path]:
    seen = set()
    raw: List[Optional[str]] = [
        settings.tessdata_path,
        settings.tessdata_prefix,
        str(_PACKAGE_DIR),
        str(_PACKAGE_DIR / "tessdata"),
        str(Path.cwd() / "tessdata"),
        str(Path.home() / ".local" / "share" / "textdetect" / "tessdata"),
    ]
    for c in raw:
        if not c:
            continue
        key = os.path.normcase(os.path.normpath(c.strip()))
        if key in seen:
            continue
        seen.add(key)
        yield Path(c.strip())


def _has_language(directory: Path, language: str) -> bool:
    return (directory / f"{language}.traineddata").is_file()


def _resolve(candidate: Path, language: str) -> Optional[Path]:
    if candidate.is_dir() and _has_language(candidate, language):
        return candidate
    nested = candidate / "tessdata"
    if nested.is_dir() and _has_language(nested, language):
        return nested
    return None


def locate(language: str, settings: Settings) -> Tuple[Optional[Path], Optional[str]]:
    """Find tessdata for `language`.

    Returns (path, None) for an explicit directory, (None, None) when the
    installed tesseract already knows the language from its default data
    directory, or (None, reason) when the language is unavailable.
    """
    for candidate in _candidates(settings):
        found = _resolve(candidate, language)
        if found is not None:
            return found, None

    try:
        installed = pytesseract.get_languages(config="")
    except pytesseract.TesseractNotFoundError as e:
        return None, f"tesseract binary not found: {e}"
    except pytesseract.TesseractError as e:
        installed = []
        logger.debug("tesseract --list-langs failed: %s", e)

    if language in installed:
        return None, None

    return None, (
        f"No tessdata directory containing '{language}.traineddata' was found. "
        "Set TEXTDETECT_TESSDATA_PATH or TESSDATA_PREFIX, or install the language pack."
    )
