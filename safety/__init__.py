"""
Safety Module

Static screening of candidate fragments before they are executed.

This module provides:
- A declarative pattern library of blocking issues and advisory warnings
- The safety analyzer that applies the library to fragment text
- Host-only (browser) API detection
- Diagnostic message sanitization (path scrubbing, length bounding)

The analyzer is pattern based. It is a pre-flight filter, not a linter, and
it does not replace the sandbox's runtime restrictions.
"""

__version__ = "0.1.0"
