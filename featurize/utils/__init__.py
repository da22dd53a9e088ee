"""Utilities around extraction: cloning, train/test splitting, dates."""

from featurize.utils.clone import clone
from featurize.utils.split import split
from featurize.utils.dates import (
    to_unix_time,
    from_unix_time,
    add_business_days,
    business_days,
)

__all__ = [
    'clone',
    'split',
    'to_unix_time',
    'from_unix_time',
    'add_business_days',
    'business_days',
]
