"""
featurize Configuration
=======================
Defaults for extraction, splitting and I/O.
Single source of truth. Library and CLI both read from here.

Usage:
    from featurize.config import CONFIG, get
    strict = get('extraction.strict_types')
"""

from datetime import datetime

CONFIG = {

    # =================================================================
    # Extraction
    # =================================================================
    'extraction': {
        # Raise HeterogeneousRecordsError instead of vectorizing rows of a
        # different type with the first record's field set.
        'strict_types': False,
        # Log a warning when any field failed to flatten during a build.
        'warn_on_degraded': True,
    },

    # =================================================================
    # Train / test split
    # =================================================================
    'split': {
        'default_ratio': 0.8,
    },

    # =================================================================
    # Dates
    # =================================================================
    'dates': {
        'epoch': datetime(1970, 1, 1),
    },

    # =================================================================
    # CLI I/O
    # =================================================================
    'io': {
        'default_format': 'parquet',
        'input_formats': ['.jsonl', '.json', '.csv'],
        'output_formats': ['.parquet', '.csv'],
    },
}


def get(path: str, default=None):
    """
    Get a config value by dot-separated path.

    Usage:
        get('extraction.strict_types')  → False
        get('split.default_ratio')      → 0.8
    """
    keys = path.split('.')
    val = CONFIG
    for key in keys:
        if isinstance(val, dict) and key in val:
            val = val[key]
        else:
            return default
    return val
