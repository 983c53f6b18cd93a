"""Iron Eye VBT - real-time kettlebell rep classification and velocity tracking."""

__version__ = "0.1.0"
