"""Re-encoding of retrieved artifacts into the requested output format."""

from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from comfyrun.execution.errors import ArtifactError
from comfyrun.execution.job import Artifact


IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg"})

FILE_TYPE_MAP = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "mp3": "audio/mpeg",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

JPEG_MODES = ("RGB", "L")
PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")


@dataclass
class TranscodedContent:
    """Final bytes of an artifact with their extension and MIME type."""

    data: bytes
    extension: str
    mime_type: str


def is_image_file(extension: str) -> bool:
    return extension in IMAGE_EXTENSIONS


def get_mime_type(extension: str) -> str:
    return FILE_TYPE_MAP.get(extension, DEFAULT_MIME_TYPE)


def _encode_image(data: bytes, output_format: str, jpeg_quality: int) -> bytes:
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ArtifactError(f"Failed to decode image: {e}") from e

    buffer = BytesIO()
    try:
        with img:
            if output_format == "jpeg":
                # JPEG has no alpha channel or palette
                if img.mode not in JPEG_MODES:
                    img = img.convert("RGB")
                img.save(buffer, format="JPEG", quality=jpeg_quality)
            else:
                # PNG cannot hold CMYK or YCbCr
                if img.mode not in PNG_MODES:
                    img = img.convert("RGB")
                img.save(buffer, format="PNG")
    except (OSError, ValueError) as e:
        raise ArtifactError(f"Failed to re-encode image: {e}") from e

    return buffer.getvalue()


def transcode(artifact: Artifact, output_format: str, jpeg_quality: int) -> TranscodedContent:
    """Re-encode image artifacts; pass everything else through unchanged.

    Raises:
        ArtifactError: If an image artifact cannot be decoded or re-encoded.
    """
    if not is_image_file(artifact.extension):
        return TranscodedContent(
            data=artifact.data,
            extension=artifact.extension,
            mime_type=get_mime_type(artifact.extension),
        )

    if output_format == "jpeg":
        return TranscodedContent(
            data=_encode_image(artifact.data, "jpeg", jpeg_quality),
            extension="jpeg",
            mime_type="image/jpeg",
        )

    return TranscodedContent(
        data=_encode_image(artifact.data, "png", jpeg_quality),
        extension="png",
        mime_type="image/png",
    )
