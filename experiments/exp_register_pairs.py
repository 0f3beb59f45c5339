"""
Experiment: Batch Registration of Fingerprint Pairs

Registers every moving/fixed pair listed in a control-point manifest
and writes the cropped, registered images plus XML/JSON metadata.

Manifest format (CSV):
    pair_id,moving,fixed,m1x,m1y,f1x,f1y,m2x,m2y,f2x,f2y

Expected Results:
- Constrained control-point distance close to 0 for pairs whose
  segments have equal length (scale factor ~1.0)
- Pairs whose images do not overlap after registration are reported
  as failures and skipped
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fingerprint_registration import print_version
from fingerprint_registration.batch import run_batch
from fingerprint_registration.utils.config import DEFAULT_CONFIG, load_config
from fingerprint_registration.utils.logger import get_logger


def run_experiment(
    manifest: str,
    output_dir: str = None,
    config_path: str = None
):
    """
    Run batch registration.

    Args:
        manifest: Path to the control-point manifest
        output_dir: Output directory (overrides the configuration)
        config_path: Optional YAML configuration file

    Returns:
        BatchSummary of the run
    """
    config = load_config(config_path) if config_path else DEFAULT_CONFIG

    logger = get_logger(
        log_dir=config.logging.log_dir,
        level=config.logging.level
    )
    logger.info(print_version())

    summary = run_batch(manifest, output_dir, config=config, logger=logger)

    print("\n" + "=" * 60)
    print("REGISTRATION RESULTS")
    print("=" * 60)
    print(f"  Pairs:      {summary.total}")
    print(f"  Registered: {len(summary.registered)}")
    print(f"  Failed:     {len(summary.failed)}")
    for pair_id, message in summary.failed.items():
        print(f"    {pair_id}: {message}")

    return summary


def main():
    parser = argparse.ArgumentParser(
        description="Rigid registration of fingerprint pairs from control points"
    )
    parser.add_argument(
        "--manifest",
        type=str,
        required=True,
        help="CSV manifest of image pairs and control points"
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default=None,
        help="Output directory for registered images and metadata"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (e.g. configs/default.yaml)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=print_version()
    )

    args = parser.parse_args()

    summary = run_experiment(
        manifest=args.manifest,
        output_dir=args.output_dir,
        config_path=args.config
    )
    sys.exit(1 if summary.failed else 0)


if __name__ == "__main__":
    main()
