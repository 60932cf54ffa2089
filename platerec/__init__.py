"""Blue licence plate location, segmentation and template-matching recognition."""

__version__ = "0.1.0"