"""
Rendering Errors
Raised by the certificate rendering engine; never carry partial output
"""


class CertificateRenderError(Exception):
    """Base class for failures of a single render call"""


class ImageLoadError(CertificateRenderError):
    """Template image could not be fetched"""


class ImageDecodeError(ImageLoadError):
    """Template image bytes could not be decoded"""


class MeasurementUnavailable(CertificateRenderError):
    """No text measurement primitive was supplied for word wrapping"""
