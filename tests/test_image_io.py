import tempfile
import unittest
from pathlib import Path
from unittest import mock

from _support import png_bytes, png_image
from PIL import Image

from errors import InvalidInput
from image_io import EncodedImage, coerce_image, load_image


class EncodedImageTests(unittest.TestCase):
    def test_data_url_round_trip(self) -> None:
        image = png_image()

        decoded = EncodedImage.from_data_url(image.to_data_url())

        self.assertEqual(decoded, image)

    def test_data_url_with_parameters(self) -> None:
        url = png_image().to_data_url().replace(";base64,", ";name=steps.png;base64,")

        self.assertEqual(EncodedImage.from_data_url(url).mime_type, "image/png")

    def test_jpg_alias_is_treated_as_jpeg(self) -> None:
        url = "data:image/jpg;base64," + png_image().to_data_url().split(",", 1)[1]

        image = EncodedImage.from_data_url(url)

        self.assertEqual(image.mime_type, "image/jpeg")
        image.validate()

    def test_bad_data_urls_are_rejected(self) -> None:
        for url in ("https://example.com/a.png", "data:image/png;base64,@@@", ""):
            with self.subTest(url=url):
                with self.assertRaises(InvalidInput):
                    EncodedImage.from_data_url(url)

    def test_open_returns_rgb_image(self) -> None:
        image = EncodedImage("image/png", png_bytes(size=(4, 3)))

        picture = image.open()

        self.assertEqual(picture.mode, "RGB")
        self.assertEqual(picture.size, (4, 3))

    def test_oversized_pixel_count_is_invalid_input(self) -> None:
        image = EncodedImage("image/png", png_bytes(size=(8, 8)))

        with mock.patch.object(Image, "MAX_IMAGE_PIXELS", 10):
            with self.assertRaisesRegex(InvalidInput, "too many pixels"):
                image.open()

    def test_coerce_rejects_other_types(self) -> None:
        with self.assertRaises(InvalidInput):
            coerce_image(b"raw bytes")


class LoadImageTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp_path = Path(self._tmp.name)

    def test_loads_and_sniffs_jpeg(self) -> None:
        path = self.tmp_path / "run.jpg"
        path.write_bytes(png_bytes(fmt="JPEG"))

        image = load_image(path)

        self.assertEqual(image.mime_type, "image/jpeg")
        self.assertEqual(image.size, path.stat().st_size)

    def test_rejects_files_over_limit(self) -> None:
        path = self.tmp_path / "big.png"
        path.write_bytes(png_bytes())

        with self.assertRaisesRegex(InvalidInput, "limit"):
            load_image(path, max_bytes=10)

    def test_rejects_files_with_too_many_pixels(self) -> None:
        path = self.tmp_path / "huge.png"
        path.write_bytes(png_bytes(size=(8, 8)))

        with mock.patch.object(Image, "MAX_IMAGE_PIXELS", 10):
            with self.assertRaisesRegex(InvalidInput, "too many pixels"):
                load_image(path)

    def test_rejects_non_images_and_missing_files(self) -> None:
        text_file = self.tmp_path / "notes.txt"
        text_file.write_text("5,432 steps", encoding="utf-8")

        with self.assertRaises(InvalidInput):
            load_image(text_file)
        with self.assertRaises(InvalidInput):
            load_image(self.tmp_path / "missing.png")


if __name__ == "__main__":
    unittest.main()
