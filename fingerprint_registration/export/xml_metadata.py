"""
XML rendering of registration metadata.

``metadata_to_xml`` returns one string per line. Each line is a
complete declaration, an opening tag, a closing tag, or a
``<tag>value</tag>`` element; joined in order they form a well-formed
document.
"""

from typing import TYPE_CHECKING, List
from xml.sax.saxutils import escape

if TYPE_CHECKING:
    from ..registration.metadata import RegistrationMetadata


XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
ROOT_TAG = "registration"
INDENT = "  "


class XmlLines:
    """Accumulates indented XML lines."""

    def __init__(self):
        self.lines: List[str] = []
        self._open: List[str] = []

    def open(self, tag: str) -> None:
        self.lines.append(f"{INDENT * len(self._open)}<{tag}>")
        self._open.append(tag)

    def close(self) -> None:
        tag = self._open.pop()
        self.lines.append(f"{INDENT * len(self._open)}</{tag}>")

    def element(self, tag: str, value) -> None:
        self.lines.append(f"{INDENT * len(self._open)}<{tag}>{escape(str(value))}</{tag}>")


def _format_float(value: float) -> str:
    return f"{value:.6f}"


def metadata_to_xml(metadata: "RegistrationMetadata") -> List[str]:
    """
    Render registration metadata as XML lines.

    Args:
        metadata: Metadata of a completed registration

    Returns:
        List of XML lines, declaration first
    """
    xml = XmlLines()
    xml.lines.append(XML_DECLARATION)
    xml.open(ROOT_TAG)

    xml.open("translation")
    xml.element("tx", metadata.translation.tx)
    xml.element("ty", metadata.translation.ty)
    xml.open("matrix")
    for row in metadata.translation.matrix_rows():
        xml.element("row", row)
    xml.close()
    xml.close()

    xml.open("rotation")
    xml.element("angle_diff_degrees", _format_float(metadata.rotation.angle_diff_degrees))
    xml.element("center_of_rotation", metadata.rotation.center_of_rotation.to_string())
    xml.open("matrix")
    for row in metadata.rotation.matrix_rows():
        xml.element("row", row)
    xml.close()
    xml.close()

    xml.open("scale_factor")
    xml.element("value", _format_float(metadata.scale_factor.value))
    xml.element("direction", metadata.scale_factor.direction_label())
    xml.close()

    xml.open("control_points")
    for name, point in metadata.control_points.points:
        xml.element(name, point.to_string())
    xml.open("euclidean_distance")
    xml.element("unconstrained", _format_float(metadata.control_points.unconstrained_distance))
    xml.element("constrained", _format_float(metadata.control_points.constrained_distance))
    xml.close()
    xml.close()

    xml.open("image_sizes")
    xml.element("src_moving", metadata.src_moving_size.wxh())
    xml.element("src_fixed", metadata.src_fixed_size.wxh())
    xml.element("padded", metadata.padded_size.wxh())
    xml.element("registered", metadata.registered_size.wxh())
    xml.close()

    conversion = metadata.convert_to_grayscale
    xml.open("convert_to_grayscale")
    xml.element("img1", conversion.yes_no(conversion.img1))
    xml.element("img2", conversion.yes_no(conversion.img2))
    xml.close()

    xml.open("overlap_roi")
    xml.element("top_left", metadata.overlap_roi_corners[0])
    xml.element("bottom_right", metadata.overlap_roi_corners[1])
    xml.close()

    xml.open("dilation_kernel")
    xml.element("shape", metadata.dilation_kernel.shape)
    xml.element("size", metadata.dilation_kernel.size)
    xml.close()

    xml.open("padding")
    for label, padding in (("moving", metadata.pad_moving), ("fixed", metadata.pad_fixed)):
        xml.open(label)
        for side, value in padding.to_dict().items():
            xml.element(side, value)
        xml.close()
    xml.close()

    xml.close()
    return xml.lines
