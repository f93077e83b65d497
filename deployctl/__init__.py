"""Command-line client for deploying and operating hosted applications."""

__version__ = "1.0.0"
