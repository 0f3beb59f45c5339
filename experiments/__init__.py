"""
Experiment scripts for fingerprint registration.

1. exp_register_pairs.py - Batch registration from a control-point manifest

Running Experiments:
-------------------
From the project root:

    python experiments/exp_register_pairs.py --manifest data/pairs.csv
    python experiments/exp_register_pairs.py --manifest data/pairs.csv --config configs/default.yaml --output_dir outputs/run1
"""
