"""
I/O utilities for fingerprint registration.

Provides functions for reading source images, writing encoded outputs,
and reading/writing control-point manifests and metadata files.
"""

import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

import cv2
import numpy as np


# Columns of a control-point manifest, in the order the coordinates are
# handed to the Registrator
POINT_COLUMNS = ['m1x', 'm1y', 'f1x', 'f1y', 'm2x', 'm2y', 'f2x', 'f2y']


@dataclass
class ManifestEntry:
    """
    One row of a control-point manifest.

    Attributes:
        pair_id: Identifier used for output file names
        moving: Path to the moving image
        fixed: Path to the fixed image
        points: Eight control-point coordinates
    """
    pair_id: str
    moving: Path
    fixed: Path
    points: List[int]


def read_bytes(path: Union[str, Path]) -> bytes:
    """
    Read an encoded image (or any file) as raw bytes.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_bytes()


def write_bytes(data: bytes, path: Union[str, Path]) -> Path:
    """
    Write raw bytes, creating parent directories as needed.

    Args:
        data: Bytes to write (e.g. a PNG buffer)
        path: Output path

    Returns:
        The output path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


def load_image(path: Union[str, Path], grayscale: bool = False) -> np.ndarray:
    """
    Load an image from disk.

    Args:
        path: Path to the image file
        grayscale: Whether to force single-channel loading

    Returns:
        Image as numpy array

    Raises:
        FileNotFoundError: If image file does not exist
        ValueError: If image cannot be loaded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    flag = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_UNCHANGED
    image = cv2.imread(str(path), flag)

    if image is None:
        raise ValueError(f"Failed to load image: {path}")

    return image


def save_image(image: np.ndarray, path: Union[str, Path]) -> None:
    """
    Save an image array to disk; the format follows the file suffix.

    Raises:
        ValueError: If OpenCV cannot write the file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if not cv2.imwrite(str(path), image):
        raise ValueError(f"Failed to write image: {path}")


def load_manifest(csv_path: Union[str, Path]) -> List[ManifestEntry]:
    """
    Load a control-point manifest.

    CSV format: ``pair_id,moving,fixed,m1x,m1y,f1x,f1y,m2x,m2y,f2x,f2y``.
    Relative image paths are resolved against the manifest's directory.

    Args:
        csv_path: Path to the CSV file

    Returns:
        List of manifest entries

    Raises:
        ValueError: If a row is missing a column or has a non-integer coordinate
    """
    csv_path = Path(csv_path)
    base_dir = csv_path.parent
    entries = []

    with open(csv_path, 'r', newline='') as f:
        reader = csv.DictReader(f)
        for line_no, row in enumerate(reader, start=2):
            try:
                points = [int(row[col]) for col in POINT_COLUMNS]
                moving = Path(row['moving'])
                fixed = Path(row['fixed'])
                pair_id = row.get('pair_id') or f"{moving.stem}_{fixed.stem}"
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"{csv_path}:{line_no}: invalid manifest row ({exc})") from exc

            if not moving.is_absolute():
                moving = base_dir / moving
            if not fixed.is_absolute():
                fixed = base_dir / fixed

            entries.append(ManifestEntry(pair_id, moving, fixed, points))

    return entries


def save_manifest(entries: List[ManifestEntry], csv_path: Union[str, Path]) -> None:
    """
    Save a control-point manifest.

    Args:
        entries: Manifest entries
        csv_path: Output path
    """
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with open(csv_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['pair_id', 'moving', 'fixed'] + POINT_COLUMNS)
        for entry in entries:
            writer.writerow([entry.pair_id, str(entry.moving), str(entry.fixed)] + list(entry.points))


def load_json(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a JSON file."""
    with open(path, 'r') as f:
        return json.load(f)


def save_json(data: Dict[str, Any], path: Union[str, Path], indent: int = 2) -> None:
    """Save data to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(data, f, indent=indent, default=str)


def save_text_lines(lines: List[str], path: Union[str, Path]) -> None:
    """Write lines (e.g. XML fragments) one per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        f.write("\n".join(lines) + "\n")
