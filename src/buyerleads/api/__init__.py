"""
FastAPI REST API for Buyer Lead Management

Provides REST endpoints for the web frontend:
- Buyer lead CRUD with ownership and conflict checks
- Filtered, searchable, paged listing
- CSV import and export
- Health checks
"""
