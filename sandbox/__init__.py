"""
Sandbox Module

Execution environment for untrusted candidate fragments.

This module provides:
- Subprocess-based invocation of a fragment's entry point
- Wall-clock deadline enforcement (the child is killed, not asked to stop)
- Memory and CPU limits (platform-dependent)
- Import restrictions and restricted builtins
- Faults and timeouts returned as values, never raised

WARNING: This sandbox is NOT cryptographically secure. It provides best-effort
isolation for practice-problem grading, not hostile multi-tenant workloads.
"""

__version__ = "0.1.0"
