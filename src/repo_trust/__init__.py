"""
Repository Trustworthiness Scoring System

This package scores open-source GitHub repositories against a fixed rubric
(correctness, license compatibility, responsiveness, bus factor, ramp-up)
and emits one NDJSON record per input URL.
"""

__version__ = "1.0.0"
