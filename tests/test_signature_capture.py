import base64
import io

import pytest
from PIL import Image

from modules.contracts.errors import ContractValidationError, EmptySignatureError, StrokeStateError
from modules.contracts.services.signature_capture import (
    DATA_URI_PREFIX,
    SignaturePad,
    decode_signature_image,
    resolve_signature,
)


def _png_data_uri(image):
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return DATA_URI_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")


def test_new_pad_is_empty_and_cannot_export():
    pad = SignaturePad()
    assert pad.is_empty
    with pytest.raises(EmptySignatureError):
        pad.export()


def test_drawn_stroke_exports_png_data_uri():
    pad = SignaturePad(width=300, height=100)
    pad.begin((10, 10))
    assert pad.is_drawing
    pad.extend((50, 60))
    pad.extend((120, 20))
    pad.end()

    assert not pad.is_drawing
    assert pad.strokes == [[(10.0, 10.0), (50.0, 60.0), (120.0, 20.0)]]

    data_uri = pad.export()
    assert data_uri.startswith(DATA_URI_PREFIX)
    image = Image.open(io.BytesIO(base64.b64decode(data_uri[len(DATA_URI_PREFIX):])))
    assert image.size == (300, 100)


def test_single_point_leaves_a_dot():
    pad = SignaturePad()
    pad.begin((40, 40))
    pad.end()
    decode_signature_image(pad.export())


def test_clear_returns_to_empty():
    pad = SignaturePad()
    pad.begin((0, 0))
    pad.extend((30, 30))
    pad.end()
    pad.clear()
    assert pad.is_empty
    with pytest.raises(EmptySignatureError):
        pad.export()


def test_extend_without_begin():
    pad = SignaturePad()
    with pytest.raises(StrokeStateError):
        pad.extend((1, 1))
    with pytest.raises(StrokeStateError):
        pad.end()


def test_begin_twice():
    pad = SignaturePad()
    pad.begin((1, 1))
    with pytest.raises(StrokeStateError):
        pad.begin((2, 2))


def test_invalid_point():
    pad = SignaturePad()
    with pytest.raises(ContractValidationError):
        pad.begin(("a", None))


def test_blank_image_is_rejected():
    blank = _png_data_uri(Image.new("RGB", (200, 80), "white"))
    with pytest.raises(EmptySignatureError):
        decode_signature_image(blank)


def test_transparent_canvas_is_rejected_as_blank():
    transparent = _png_data_uri(Image.new("RGBA", (200, 80), (0, 0, 0, 0)))
    with pytest.raises(EmptySignatureError):
        decode_signature_image(transparent)


@pytest.mark.parametrize("payload", [
    "not a data uri",
    "data:text/plain;base64,aGVsbG8=",
    DATA_URI_PREFIX + "%%%",
    DATA_URI_PREFIX + base64.b64encode(b"not an image").decode("ascii"),
])
def test_malformed_signature_is_rejected(payload):
    with pytest.raises(ContractValidationError):
        decode_signature_image(payload)


def test_resolve_signature_accepts_strokes():
    data_uri = resolve_signature(strokes=[[(10, 10), (90, 70)], [(100, 20)]])
    assert data_uri.startswith(DATA_URI_PREFIX)


def test_resolve_signature_requires_something():
    with pytest.raises(EmptySignatureError):
        resolve_signature()
    with pytest.raises(EmptySignatureError):
        resolve_signature(signature="", strokes=[])
