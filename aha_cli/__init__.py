"""aha-cli: terminal browser and PR synchronizer for Aha! work tracking."""

__version__ = "0.3.0"
