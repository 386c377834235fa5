"""
Input Recording Command-Line Interface
======================================

- **recinfo**: Create, inspect, dump and validate recording files

The tool is a Click-based CLI application.
"""

__all__ = ["recinfo"]
