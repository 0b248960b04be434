"""
Font Registry
Resolves font family names to Pillow fonts and measures text with them
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import ImageFont

from app.config import settings
from app.services.text_layout import FontSpec

logger = logging.getLogger(__name__)


class FontRegistry:
    """Font lookup with a per-(family, size) cache"""

    FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")

    def __init__(self, font_dirs: Optional[List[str]] = None, default_family: Optional[str] = None):
        self.font_dirs = [Path(d) for d in (font_dirs if font_dirs is not None else settings.font_dirs)]
        self.default_family = default_family or settings.DEFAULT_FONT_FAMILY
        self._fonts: Dict[Tuple[str, int], ImageFont.FreeTypeFont] = {}

    @staticmethod
    def _families(font_family: str) -> List[str]:
        # "Georgia, 'Times New Roman', serif" -> ["Georgia", "Times New Roman", "serif"]
        return [f.strip().strip("'\"") for f in (font_family or "").split(",") if f.strip()]

    def _file_names(self, family: str) -> List[str]:
        if family.lower().endswith(self.FONT_EXTENSIONS):
            return [family]
        names = []
        for base in dict.fromkeys([family, family.replace(" ", ""), family.replace(" ", "-"), family.lower()]):
            names.extend(f"{base}{ext}" for ext in self.FONT_EXTENSIONS)
        return names

    def _load_family(self, family: str, size: int) -> Optional[ImageFont.FreeTypeFont]:
        candidates = self._file_names(family)
        for font_dir in self.font_dirs:
            for candidate in candidates:
                font_path = font_dir / candidate
                if font_path.exists():
                    return ImageFont.truetype(str(font_path), size)
        for candidate in candidates:
            try:
                return ImageFont.truetype(candidate, size)
            except OSError:
                continue
        return None

    def get(self, font: FontSpec) -> ImageFont.FreeTypeFont:
        """Pillow font for `font`, falling back to the default family, then Pillow's built-in font"""
        key = (font.family, font.size)
        cached = self._fonts.get(key)
        if cached is not None:
            return cached

        loaded = None
        for family in self._families(font.family) + [self.default_family]:
            loaded = self._load_family(family, font.size)
            if loaded is not None:
                break
        if loaded is None:
            logger.debug("No font file for %r, using Pillow's default font", font.family)
            loaded = ImageFont.load_default(size=font.size)

        self._fonts[key] = loaded
        return loaded

    def measure(self, text: str, font: FontSpec) -> float:
        """Advance width of `text` in native pixels"""
        return self.get(font).getlength(text)


# Singleton
font_registry = FontRegistry()
