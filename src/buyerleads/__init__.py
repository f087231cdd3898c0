"""
Buyer Leads - Core Package

Buyer lead management for real estate teams: validation, CSV import/export,
change tracking and the record service behind the REST API.
"""

__version__ = "1.0.0"
