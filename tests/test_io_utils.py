import io
import os

import pytest
from PIL import Image

import io_utils
from conftest import encode, gradient_rgba
from errors import DecodeError
from pixelbuffer import PixelBuffer


def test_decode_png_to_rgba_buffer():
    buf = io_utils.decode_image(encode(gradient_rgba(10, 6)))
    assert buf.size == (10, 6)
    assert buf.pixels.shape == (6, 10, 4)


def test_decode_accepts_bytearray_and_memoryview():
    data = encode(gradient_rgba(5, 5))
    assert io_utils.decode_image(bytearray(data)).size == (5, 5)
    assert io_utils.decode_image(memoryview(data)).size == (5, 5)


def test_decode_paletted_and_grayscale():
    for mode in ("P", "L", "LA", "CMYK"):
        img = Image.new(mode, (4, 3))
        out = io.BytesIO()
        img.save(out, format="TIFF" if mode == "CMYK" else "PNG")
        assert io_utils.decode_image(out.getvalue()).size == (4, 3)


@pytest.mark.parametrize("data", [b"", b"GIF89a-but-not-really", b"\x89PNG\r\n\x1a\n" + b"\x00" * 20])
def test_decode_rejects_garbage(data):
    with pytest.raises(DecodeError):
        io_utils.decode_image(data)


def test_decode_rejects_truncated_png():
    data = encode(gradient_rgba(64, 64))
    with pytest.raises(DecodeError):
        io_utils.decode_image(data[: len(data) // 2])


def test_decode_rejects_oversized_images():
    out = io.BytesIO()
    Image.new("L", (io_utils.MAX_DIMENSION + 1, 1)).save(out, format="PNG")
    with pytest.raises(DecodeError):
        io_utils.decode_image(out.getvalue())


def test_decode_error_is_a_value_error():
    assert issubclass(DecodeError, ValueError)


def test_bad_data_urls():
    with pytest.raises(DecodeError):
        io_utils.decode_image("not a data url")
    with pytest.raises(DecodeError):
        io_utils.decode_image("data:image/png;base64,@@@")


def test_encode_jpeg_drops_alpha_png_keeps_it():
    buf = PixelBuffer(gradient_rgba(8, 8, alpha=60))
    jpeg = io_utils.encode_image(buf, "JPEG", quality=90)
    png = io_utils.encode_image(buf, "PNG")
    with Image.open(io.BytesIO(jpeg)) as im:
        assert im.mode == "RGB"
    with Image.open(io.BytesIO(png)) as im:
        assert im.mode == "RGBA"
        assert im.getpixel((0, 0))[3] == 60


def test_encode_rejects_unknown_format():
    with pytest.raises(ValueError):
        io_utils.encode_image(PixelBuffer.filled(2, 2), "BMP")


def test_data_url_helpers():
    url = io_utils.to_data_url(b"abc", "PNG")
    assert url == "data:image/png;base64,YWJj"
    assert io_utils.decode_data_url(url) == b"abc"
    assert io_utils.to_data_url(b"abc", "JPEG").startswith("data:image/jpeg;")


def test_file_helpers(tmp_path):
    dst = tmp_path / "nested" / "a.bin"
    io_utils.write_bytes(str(dst), b"123")
    assert io_utils.read_bytes(str(dst)) == b"123"
    with pytest.raises(FileExistsError):
        io_utils.write_bytes(str(dst), b"456", overwrite=False)
    assert io_utils.make_output_path("out", "/x/photo.jpeg", "sketch-maker-charcoal", "jpg") == \
        os.path.join("out", "photo_sketch-maker-charcoal.jpg")
