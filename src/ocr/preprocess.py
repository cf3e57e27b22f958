from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ImageDecodeError


def decode_image(image_bytes: bytes) -> Image.Image:
    """Decode image bytes fully; any failure is an ImageDecodeError."""

    try:
        im = Image.open(BytesIO(image_bytes))
        im.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(
            "failed to decode image for OCR",
            detail={"size_bytes": len(image_bytes), "reason": str(e)},
        ) from e
    if im.width <= 0 or im.height <= 0:
        raise ImageDecodeError("image has no pixels", detail={"width": im.width, "height": im.height})
    return im


def ocr_scale(width: int, *, max_scale: int = 3, max_scaled_width: int = 6000) -> int:
    """Largest integer upscale <= max_scale that keeps the width within max_scaled_width (at least 1)."""

    scale = max_scale
    while scale > 1 and width * scale > max_scaled_width:
        scale -= 1
    return max(scale, 1)


def flatten_to_luma(image: Image.Image) -> Image.Image:
    # Transparent pixels become white paper, not black ink.
    rgba = image.convert("RGBA")
    background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    return Image.alpha_composite(background, rgba).convert("L")


def contrast_stretch(gray: Image.Image) -> Image.Image:
    lo, hi = gray.getextrema()
    if hi <= lo:
        return gray.copy()
    return ImageOps.autocontrast(gray, cutoff=0)


def binarize(gray: Image.Image, threshold: int) -> Image.Image:
    return gray.point(lambda v: 255 if v > threshold else 0)


def preprocess_variants(
    image: Image.Image, scale: int, *, binarize_threshold: float = 0.65
) -> list[Image.Image]:
    """
    Build the ordered recognition variants:
    - [0] upscaled, contrast-stretched, binarized (primary)
    - [1] upscaled, contrast-stretched greyscale
    """

    gray = flatten_to_luma(image)
    if scale > 1:
        gray = gray.resize((gray.width * scale, gray.height * scale), Image.Resampling.LANCZOS)
    stretched = contrast_stretch(gray)
    bin_img = binarize(stretched, int(binarize_threshold * 255))
    return [bin_img, stretched]
