"""
Plain-text summaries of a registration run.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..registration.metadata import RegistrationMetadata


def metadata_to_text(metadata: "RegistrationMetadata") -> str:
    """
    Render metadata as a human-readable report.

    Args:
        metadata: Metadata of a completed registration

    Returns:
        Multi-line report ending with a newline
    """
    lines = [
        "Registration metadata:",
        f" * Translation: tx={metadata.translation.tx}, ty={metadata.translation.ty}",
    ]
    lines.extend(f"    {row}" for row in metadata.translation.matrix_rows())
    lines.append(
        f" * Rotation: {metadata.rotation.angle_diff_degrees:.6f} degrees about "
        f"({metadata.rotation.center_of_rotation.to_string()})"
    )
    lines.extend(f"    {row}" for row in metadata.rotation.matrix_rows())
    lines.append(
        f" * Scale factor ({metadata.scale_factor.direction_label()}): "
        f"{metadata.scale_factor.value:.6f}"
    )
    lines.append(" * Control points:")
    for name, point in metadata.control_points.points:
        lines.append(f"    {name}: ({point.to_string()})")
    lines.append(
        f"    distance unconstrained: {metadata.control_points.unconstrained_distance:.6f}"
    )
    lines.append(
        f"    distance constrained:   {metadata.control_points.constrained_distance:.6f}"
    )
    lines.append(
        f" * Image sizes: moving {metadata.src_moving_size.wxh()}, "
        f"fixed {metadata.src_fixed_size.wxh()}, padded {metadata.padded_size.wxh()}, "
        f"registered {metadata.registered_size.wxh()}"
    )
    if metadata.convert_to_grayscale.any():
        conversion = metadata.convert_to_grayscale
        lines.append(
            f" * Converted to grayscale: img1 {conversion.yes_no(conversion.img1)}, "
            f"img2 {conversion.yes_no(conversion.img2)}"
        )
    lines.append(
        f" * ROI: {metadata.overlap_roi_corners[0]} -> {metadata.overlap_roi_corners[1]}"
    )
    return "\n".join(lines) + "\n" + metadata.dilation_kernel.to_text()
