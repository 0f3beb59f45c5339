"""
Batch registration of image pairs listed in a control-point manifest.

Each pair is registered independently; a pair that fails is logged and
recorded, and the batch continues with the next one.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import RegistrationError
from .export import metadata_to_text
from .registration import Registrator
from .utils.config import Config, DEFAULT_CONFIG
from .utils.io import (
    ManifestEntry,
    load_manifest,
    read_bytes,
    save_json,
    save_text_lines,
    write_bytes,
)
from .utils.logger import ProgressTracker, RegistrationLogger


@dataclass
class BatchSummary:
    """
    Outcome of a batch run.

    Attributes:
        registered: Pair ids that registered
        failed: Pair id -> error message for pairs that did not
    """
    registered: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.registered) + len(self.failed)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'total': self.total,
            'registered': self.registered,
            'failed': self.failed,
        }


def register_pair(
    entry: ManifestEntry,
    output_dir: Union[str, Path],
    config: Config = DEFAULT_CONFIG
) -> Registrator:
    """
    Register one manifest entry and write its outputs.

    Written files (prefixed with the pair id): cropped moving and fixed
    PNGs, metadata as XML and JSON, and optionally the overlay, the
    padded images and the overlap mask.

    Args:
        entry: Manifest entry
        output_dir: Directory for output files
        config: Configuration

    Returns:
        The Registrator holding the run's results

    Raises:
        RegistrationError: If the pair cannot be registered
        FileNotFoundError: If an image file is missing
    """
    output_dir = Path(output_dir)
    prefix = output_dir / entry.pair_id

    registrator = Registrator(
        read_bytes(entry.moving),
        read_bytes(entry.fixed),
        entry.points,
        config=config
    )
    metadata = registrator.perform_registration()

    registrator.save_cropped_registered_image_to_disk(f"{prefix}_moving_registered.png")
    registrator.save_cropped_fixed_image_to_disk(f"{prefix}_fixed_cropped.png")
    save_text_lines(registrator.get_xml_metadata(), f"{prefix}_metadata.xml")
    save_json(metadata.to_dict(), f"{prefix}_metadata.json")

    if config.output.save_overlay:
        write_bytes(registrator.get_color_overlaid_registered_images(), f"{prefix}_overlay.png")
    if config.output.save_padded:
        write_bytes(registrator.get_padded_registered_moving_image(), f"{prefix}_moving_padded.png")
        write_bytes(registrator.get_padded_fixed_image(), f"{prefix}_fixed_padded.png")
    if config.output.save_blob:
        write_bytes(registrator.get_png_blob(), f"{prefix}_overlap_mask.png")

    return registrator


def run_batch(
    manifest_path: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    config: Config = DEFAULT_CONFIG,
    logger: Optional[RegistrationLogger] = None
) -> BatchSummary:
    """
    Register every pair of a manifest.

    Args:
        manifest_path: CSV manifest (see ``utils.io.load_manifest``)
        output_dir: Output directory (default: ``config.output.output_dir``)
        config: Configuration
        logger: Optional logger for progress, metrics and failures

    Returns:
        BatchSummary of registered and failed pairs
    """
    output_dir = Path(output_dir or config.output.output_dir)
    entries = load_manifest(manifest_path)
    summary = BatchSummary()

    if logger:
        logger.info(f"Registering {len(entries)} pairs from {manifest_path}")
        logger.log_params({
            'manifest': str(manifest_path),
            'output_dir': str(output_dir),
            'background_value': config.registration.background_value,
            'interpolation': config.registration.interpolation,
            'kernel_shape': config.overlap.kernel_shape,
            'kernel_size': config.overlap.kernel_size,
        })

    tracker = ProgressTracker(len(entries), logger)

    for entry in entries:
        try:
            registrator = register_pair(entry, output_dir, config)
        except (RegistrationError, FileNotFoundError) as exc:
            summary.failed[entry.pair_id] = f"{type(exc).__name__}: {exc}"
            if logger:
                logger.log_failure(entry.pair_id, exc)
        else:
            summary.registered.append(entry.pair_id)
            if logger:
                metadata = registrator.get_metadata()
                logger.debug(metadata_to_text(metadata))
                logger.log_metric('angle_diff_degrees', metadata.rotation.angle_diff_degrees, entry.pair_id)
                logger.log_metric('scale_factor', metadata.scale_factor.value, entry.pair_id)
                logger.log_metric(
                    'constrained_distance',
                    metadata.control_points.constrained_distance,
                    entry.pair_id
                )
        tracker.update()

    tracker.finish()

    if logger:
        logger.log_results({
            'pairs': summary.total,
            'registered': len(summary.registered),
            'failed': len(summary.failed),
        })
        if config.logging.save_results:
            logger.save_metrics()

    return summary
