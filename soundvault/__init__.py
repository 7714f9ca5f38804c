"""SoundVault: personal music library and streaming service."""

__version__ = "1.0.0"
