"""LifeTrack: personal task tracker with local reminders."""

__version__ = "0.1.0"
