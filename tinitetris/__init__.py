"""Four-player falling-block battle game with modelled video, sound and input."""

__version__ = "0.1.0"