import io
import sys
from pathlib import Path
from unittest import mock

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from PIL import Image  # noqa: E402

from image_io import EncodedImage  # noqa: E402


def png_bytes(size=(8, 8), color=(16, 185, 129), fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def png_image() -> EncodedImage:
    return EncodedImage(mime_type="image/png", data=png_bytes())


def fake_model(response=None, side_effect=None) -> mock.Mock:
    model = mock.Mock()
    model.call_model.return_value = response
    if side_effect is not None:
        model.call_model.side_effect = side_effect
    return model
