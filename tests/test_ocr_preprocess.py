from __future__ import annotations

import unittest
from io import BytesIO

from PIL import Image

from ocr.errors import ImageDecodeError
from ocr.preprocess import decode_image, ocr_scale, preprocess_variants


def _png_bytes(image: Image.Image) -> bytes:
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class TestOcrScale(unittest.TestCase):
    def test_scale_respects_width_cap(self) -> None:
        self.assertEqual(ocr_scale(800), 3)
        self.assertEqual(ocr_scale(2000), 3)
        self.assertEqual(ocr_scale(2500), 2)
        self.assertEqual(ocr_scale(7000), 1)

    def test_custom_limits(self) -> None:
        self.assertEqual(ocr_scale(100, max_scale=1), 1)
        self.assertEqual(ocr_scale(100, max_scale=4, max_scaled_width=350), 3)


class TestDecode(unittest.TestCase):
    def test_undecodable_bytes(self) -> None:
        with self.assertRaises(ImageDecodeError) as ctx:
            decode_image(b"definitely not an image")
        self.assertEqual(ctx.exception.code, "OCR_IMAGE_DECODE_FAILED")
        self.assertEqual(ctx.exception.detail["size_bytes"], 23)

    def test_decodes_png(self) -> None:
        im = decode_image(_png_bytes(Image.new("RGB", (30, 20), "white")))
        self.assertEqual(im.size, (30, 20))


class TestVariants(unittest.TestCase):
    def test_variants_are_upscaled_luma(self) -> None:
        im = Image.new("RGBA", (20, 10), (0, 0, 0, 0))
        im.paste((0, 0, 0, 255), (5, 2, 15, 8))

        variants = preprocess_variants(im, 2)

        self.assertEqual(len(variants), 2)
        for v in variants:
            self.assertEqual(v.mode, "L")
            self.assertEqual(v.size, (40, 20))

    def test_transparent_background_becomes_white(self) -> None:
        im = Image.new("RGBA", (20, 10), (0, 0, 0, 0))
        im.paste((0, 0, 0, 255), (5, 2, 15, 8))

        binarized, stretched = preprocess_variants(im, 1)

        self.assertEqual(binarized.getpixel((0, 0)), 255)
        self.assertEqual(binarized.getpixel((10, 5)), 0)
        self.assertEqual(stretched.getpixel((0, 0)), 255)

    def test_binarized_variant_has_only_black_and_white(self) -> None:
        im = Image.linear_gradient("L").resize((64, 64))
        binarized, _ = preprocess_variants(im, 1)
        hist = binarized.histogram()
        self.assertEqual(sum(hist[1:255]), 0)
        self.assertGreater(hist[0], 0)
        self.assertGreater(hist[255], 0)

    def test_low_contrast_is_stretched(self) -> None:
        im = Image.new("L", (10, 10), 100)
        im.paste(150, (0, 0, 5, 10))
        _, stretched = preprocess_variants(im, 1)
        self.assertEqual(stretched.getextrema(), (0, 255))

    def test_flat_image_survives(self) -> None:
        im = Image.new("L", (10, 10), 128)
        binarized, stretched = preprocess_variants(im, 1)
        self.assertEqual(stretched.getextrema(), (128, 128))
        self.assertEqual(binarized.getextrema(), (0, 0))


if __name__ == "__main__":
    unittest.main()
