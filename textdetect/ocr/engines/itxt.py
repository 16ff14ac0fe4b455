from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ...schema import OcrToken


class EngineUnavailable(Exception):
    """The OCR engine cannot run here (binary, language data or package missing)."""


class ITxtExtractor(ABC):
    """Interface for OCR engines that report word boxes for an encoded image."""

    name: str = "unknown"

    def probe(self) -> Optional[str]:
        """Return None when the engine can run, else a human readable reason."""
        return None

    @abstractmethod
    def run(self, image_png: bytes, psm: int = 3) -> Iterator[OcrToken]:
        """Yield OcrToken(bbox, text, conf_percent) for every recognised word.

        Raises EngineUnavailable when the engine cannot process the image.
        """
        ...
