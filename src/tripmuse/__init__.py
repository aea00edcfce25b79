"""TripMuse: preference learning and explainable venue ranking."""

__version__ = "0.1.0"
