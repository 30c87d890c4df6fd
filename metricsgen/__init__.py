"""Mock metrics backend serving synthetic, configurable time-varying values."""

__version__ = "0.1.0"
