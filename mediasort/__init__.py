"""
mediasort - Reliably sort photos and videos into a year/month folder structure.

Takes a folder of arbitrarily named photos and videos and moves each one into
a dated destination tree under a reproducible name, so that running it over
two folders holding the same media yields the same layout.
"""

__version__ = "1.0.0"


# Public API
from .classifier import ClassifiedFile, MediaClassifier
from .cli import main
from .config import Config
from .constants import MediaKind
from .core import ConfigurationError, MediaSorter, MediaSorterError, SortState
from .hashing import ContentHasher
from .identity import IdentityResolver
from .stats import SortCounters, SortSummary
from .timestamps import CreationDateResolver, DateComponents

__all__ = [ "main", "Config", "MediaSorter", "MediaSorterError", "ConfigurationError",
            "SortState", "MediaKind", "MediaClassifier", "ClassifiedFile", "ContentHasher",
            "CreationDateResolver", "DateComponents", "IdentityResolver", "SortCounters",
            "SortSummary" ]
