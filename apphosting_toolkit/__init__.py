"""App Hosting secret provisioning toolkit."""

__version__ = "0.1.0"
