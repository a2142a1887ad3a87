"""Weekly training progression advisor for bodyweight strength work."""

__version__ = "0.1.0"
