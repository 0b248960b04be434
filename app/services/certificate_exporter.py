"""
Certificate Exporter
Encodes rendered rasters as PNG or single-page PDF and packages bulk ZIPs
"""

import re
import zipfile
from datetime import date
from io import BytesIO
from typing import Iterable, Optional, Sequence, Tuple

import img2pdf
from PIL import Image

from app.config import settings
from app.schemas.certificate import ExportFormat
from app.schemas.member import Member
from app.schemas.template import FieldDefinition

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE)


class CertificateExporter:
    """Format wrappers around the canonical raster"""

    @staticmethod
    def encode_png(image: Image.Image) -> bytes:
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    @staticmethod
    def flatten(image: Image.Image, background: str = "white") -> Image.Image:
        """Drop alpha by compositing over a solid background"""
        if image.mode == "RGB":
            return image
        rgba = image.convert("RGBA")
        flat = Image.new("RGB", rgba.size, background)
        flat.paste(rgba, mask=rgba.getchannel("A"))
        return flat

    @staticmethod
    def encode_pdf(image: Image.Image, dpi: Optional[int] = None) -> bytes:
        """One page exactly the size of the raster"""
        dpi = dpi or settings.PDF_DPI
        png_bytes = CertificateExporter.encode_png(CertificateExporter.flatten(image))
        layout = img2pdf.get_fixed_dpi_layout_fun((dpi, dpi))
        return img2pdf.convert(png_bytes, layout_fun=layout)

    @staticmethod
    def encode(image: Image.Image, export_format: ExportFormat) -> bytes:
        if export_format == ExportFormat.PDF:
            return CertificateExporter.encode_pdf(image)
        return CertificateExporter.encode_png(image)

    @staticmethod
    def certificate_filename(fields: Sequence[FieldDefinition], member: Member, export_format: ExportFormat) -> str:
        """First field's value made filesystem-safe, else `certificate_<id>`"""
        extension = export_format.value
        first_field = fields[0] if fields else None
        value = member.values.get(first_field.name) if first_field else None
        if value:
            return f"{UNSAFE_FILENAME_CHARS.sub('_', value)}.{extension}"
        return f"certificate_{member.id}.{extension}"

    @staticmethod
    def zip_filename(today: Optional[date] = None) -> str:
        return f"certificates_{(today or date.today()).isoformat()}.zip"

    @staticmethod
    def _unique_name(name: str, used: set) -> str:
        if name not in used:
            return name
        stem, dot, extension = name.rpartition(".")
        counter = 2
        while f"{stem}_{counter}{dot}{extension}" in used:
            counter += 1
        return f"{stem}_{counter}{dot}{extension}"

    @staticmethod
    def build_zip(certificates: Iterable[Tuple[str, bytes]], data_json: str) -> bytes:
        """
        ZIP with `certificates/<file>` entries and `certificate_data.json`

        Args:
            certificates: (filename, content) pairs in roster order
            data_json: Serialized exchange document

        Returns:
            ZIP archive bytes
        """
        buffer = BytesIO()
        used: set = set()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr("certificates/", b"")
            for filename, content in certificates:
                filename = CertificateExporter._unique_name(filename, used)
                used.add(filename)
                archive.writestr(f"certificates/{filename}", content)
            archive.writestr("certificate_data.json", data_json)
        return buffer.getvalue()
