"""
Freehand signature capture.

``SignaturePad`` mirrors the browser drawing surface: strokes are opened with
``begin``, grown with ``extend`` and closed with ``end``. ``export`` rasterizes
whatever has been drawn into a PNG data URI. Browsers either post that data
URI directly or post the raw strokes, which are replayed through the pad.
"""
import base64
import binascii
import io
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError

from modules.contracts.errors import ContractValidationError, EmptySignatureError, StrokeStateError


Point = Tuple[float, float]

DATA_URI_PREFIX = "data:image/png;base64,"
MAX_SIGNATURE_BYTES = 2 * 1024 * 1024  # 2 MB


class SignaturePad:

    def __init__(
        self,
        width: int = 600,
        height: int = 200,
        stroke_width: int = 2,
        stroke_color: str = "#000000",
        background: str = "#ffffff",
    ):
        self.width = width
        self.height = height
        self.stroke_width = stroke_width
        self.stroke_color = stroke_color
        self.background = background
        self._strokes: List[List[Point]] = []
        self._current: Optional[List[Point]] = None

    @property
    def is_drawing(self) -> bool:
        return self._current is not None

    @property
    def is_empty(self) -> bool:
        return not self._strokes and not self._current

    @property
    def strokes(self) -> List[List[Point]]:
        return [list(stroke) for stroke in self._strokes]

    def begin(self, point: Point) -> None:
        if self._current is not None:
            raise StrokeStateError("A stroke is already in progress")
        self._current = [self._coerce(point)]

    def extend(self, point: Point) -> None:
        if self._current is None:
            raise StrokeStateError()
        self._current.append(self._coerce(point))

    def end(self) -> None:
        if self._current is None:
            raise StrokeStateError()
        self._strokes.append(self._current)
        self._current = None

    def clear(self) -> None:
        self._strokes = []
        self._current = None

    def export(self) -> str:
        """PNG data URI of the strokes drawn so far."""
        strokes = list(self._strokes)
        if self._current:
            strokes.append(self._current)
        if not strokes:
            raise EmptySignatureError()

        image = Image.new("RGB", (self.width, self.height), self.background)
        draw = ImageDraw.Draw(image)
        radius = max(self.stroke_width / 2.0, 0.5)
        for stroke in strokes:
            if len(stroke) == 1:
                # A tap leaves a dot
                x, y = stroke[0]
                draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=self.stroke_color)
            else:
                draw.line(stroke, fill=self.stroke_color, width=self.stroke_width, joint="curve")

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return DATA_URI_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")

    @classmethod
    def from_strokes(cls, strokes: Sequence[Sequence[Point]], **kwargs) -> "SignaturePad":
        """Replays vector strokes, one begin/extend.../end per stroke."""
        pad = cls(**kwargs)
        for stroke in strokes:
            if not stroke:
                continue
            pad.begin(stroke[0])
            for point in stroke[1:]:
                pad.extend(point)
            pad.end()
        return pad

    @staticmethod
    def _coerce(point: Point) -> Point:
        try:
            x, y = point
            return float(x), float(y)
        except (TypeError, ValueError):
            raise ContractValidationError("Signature points must be (x, y) pairs")


def decode_signature_image(data_uri: str) -> bytes:
    """
    Validates a signature data URI and returns it as PNG bytes.

    Raises EmptySignatureError when nothing was drawn on the image and
    ContractValidationError when the payload is not an image at all.
    """
    raw = (data_uri or "").strip()
    if not raw:
        raise EmptySignatureError()

    header, separator, payload = raw.partition(",")
    if not separator or not header.startswith("data:image/") or ";base64" not in header:
        raise ContractValidationError("Signature must be a base64 image data URI")

    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ContractValidationError("Signature image is not valid base64")

    if len(image_bytes) > MAX_SIGNATURE_BYTES:
        raise ContractValidationError("Signature image is too large")

    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, OSError):
        raise ContractValidationError("Signature image could not be read")

    # Canvas exports are often transparent, flatten onto white first
    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGBA")
        flattened = Image.new("RGBA", image.size, (255, 255, 255, 255))
        flattened.alpha_composite(image)
        image = flattened
    grayscale = image.convert("L")
    if ImageOps.invert(grayscale).getbbox() is None:
        raise EmptySignatureError()

    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="PNG")
    return buffer.getvalue()


def resolve_signature(
    signature: Optional[str] = None,
    strokes: Optional[Sequence[Sequence[Point]]] = None,
) -> str:
    """
    Single entry point for both call sites (admin at send time, guest at sign
    time): returns a validated PNG data URI from either form of input.
    """
    if strokes:
        signature = SignaturePad.from_strokes(strokes).export()
    if not signature:
        raise EmptySignatureError()
    png_bytes = decode_signature_image(signature)
    return DATA_URI_PREFIX + base64.b64encode(png_bytes).decode("ascii")
