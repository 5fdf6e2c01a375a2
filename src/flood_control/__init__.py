"""
flood_control package.

Analysis pipeline for public flood-control infrastructure project records:
- parse and validate the dataset
- filter to an analysis year range
- build regional, contractor and annual-trend reports plus a summary
"""

__all__ = []
__version__ = "0.1.0"
