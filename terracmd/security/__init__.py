"""
Security module for terracmd.

This module provides utilities for handling the API token and other
sensitive data, and for validating inputs before they reach a URL or a
terraform command line.
"""

from .sanitizer import InputSanitizer
from .secure_memory import SecureString, OutputRedactor

__all__ = ["InputSanitizer", "SecureString", "OutputRedactor"]
