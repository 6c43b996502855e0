"""ARTBAT Prague admin backend: JSON documents persisted over FTP."""

__version__ = "0.3.0"
