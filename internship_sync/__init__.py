"""Keep the portal's internship listing in sync with posting due dates."""

__version__ = "0.1.0"
