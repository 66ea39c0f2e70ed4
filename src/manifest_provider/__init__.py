"""
Manifest Provider

Turns a project's package manifest into a normalized request body for
dependency stack and component analysis.
"""

__version__ = "0.1.0"
__author__ = "Manifest Provider Team"
__description__ = "Manifest to analysis request body providers for multiple package ecosystems"
