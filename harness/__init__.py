"""
Harness Module

Configuration, suite files and the command line interface.

This module provides:
- YAML-based configuration of execution budgets and sandbox policy
- YAML test suite loading
- CLI for screening fragments and running suites against them
"""

__version__ = "0.1.0"
