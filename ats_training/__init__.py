"""Training-data acquisition and ATS ground-truth labeling."""

__version__ = "0.1.0"
