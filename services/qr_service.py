# token_qr/services/qr_service.py

import io
import xml.etree.ElementTree as ET
from enum import Enum

import qrcode
from qrcode.exceptions import DataOverflowError
from qrcode.image.svg import SvgPathImage

from services.errors import SynthesisError

SVG_NS = "http://www.w3.org/2000/svg"

DEFAULT_QR_SIZE = 256
CAPTION_HEIGHT = 40
CAPTION_BASELINE = 30
CAPTION_FONT_RATIO = 0.12
CAPTION_MAX_FONT = 20
CAPTION_WIDTH_RATIO = 0.9


# ---------------- Theme ----------------
class Theme(Enum):
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def parse(cls, value) -> "Theme":
        """Anything other than "dark" falls back to light."""
        if isinstance(value, Theme):
            return value
        if str(value or "").strip().lower() == cls.DARK.value:
            return cls.DARK
        return cls.LIGHT

    @property
    def foreground(self) -> str:
        return "#ffffff" if self is Theme.DARK else "#000000"

    @property
    def background(self) -> str:
        return "#000000" if self is Theme.DARK else "#ffffff"


class LightSvgPathImage(SvgPathImage):
    QR_PATH_STYLE = {**SvgPathImage.QR_PATH_STYLE, "fill": Theme.LIGHT.foreground}
    background = Theme.LIGHT.background


class DarkSvgPathImage(SvgPathImage):
    QR_PATH_STYLE = {**SvgPathImage.QR_PATH_STYLE, "fill": Theme.DARK.foreground}
    background = Theme.DARK.background


_IMAGE_FACTORIES = {
    Theme.LIGHT: LightSvgPathImage,
    Theme.DARK: DarkSvgPathImage,
}


# ---------------- Payload & symbol ----------------
def build_payload(token: str, base_url: str) -> str:
    if not base_url.endswith("/"):
        base_url += "/"
    return f"{base_url}{token}"


def render_symbol(payload: str, theme: Theme) -> str:
    """
    Encode the payload as a standalone SVG document without a quiet zone.
    The viewBox spans one unit per QR module. Raises DataOverflowError
    when the payload doesn't fit the largest symbol.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=0,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(image_factory=_IMAGE_FACTORIES[theme])
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue().decode("utf-8")


# ---------------- Canvas & caption ----------------
def _num(value) -> str:
    return f"{value:g}"


def _local_name(tag: str) -> str:
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


def native_size(root: ET.Element) -> float:
    try:
        size = float(root.get("viewBox", "").split()[2])
    except (IndexError, ValueError):
        return DEFAULT_QR_SIZE
    return size if size > 0 else DEFAULT_QR_SIZE


def augment_svg(markup: str, token: str, theme: Theme) -> str:
    """
    Grow the canvas by a caption band under the symbol and write the token
    into it. The symbol geometry itself is left untouched.
    """
    try:
        root = ET.fromstring(markup.encode("utf-8"))
    except ET.ParseError as e:
        raise SynthesisError(token, f"encoder returned invalid SVG ({e})") from e

    for el in root.iter():
        el.tag = _local_name(el.tag)
    root.set("xmlns", SVG_NS)

    size = native_size(root)
    total_height = size + CAPTION_HEIGHT

    root.set("width", _num(size))
    root.set("height", _num(total_height))
    root.set("viewBox", f"0 0 {_num(size)} {_num(total_height)}")

    caption = ET.SubElement(
        root,
        "text",
        {
            "x": "50%",
            "y": _num(size + CAPTION_BASELINE),
            "text-anchor": "middle",
            "font-family": "Arial, sans-serif",
            "font-size": _num(min(size * CAPTION_FONT_RATIO, CAPTION_MAX_FONT)),
            "textLength": _num(size * CAPTION_WIDTH_RATIO),
            "lengthAdjust": "spacing",
            "font-weight": "bold",
            "fill": theme.foreground,
        },
    )
    caption.text = token

    # Serializing the parsed tree drops the XML declaration and any DOCTYPE
    return ET.tostring(root, encoding="unicode")


def synthesize(token: str, theme: Theme, base_url: str) -> str:
    payload = build_payload(token, base_url)
    try:
        markup = render_symbol(payload, theme)
    except (DataOverflowError, ValueError) as e:
        raise SynthesisError(token, f"couldn't encode payload ({str(e) or 'data overflow'})") from e
    return augment_svg(markup, token, theme)


def artifact_filename(token: str, extension: str = "svg") -> str:
    return f"qr_{token}.{extension}"
