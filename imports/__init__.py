"""
Imports module - Data sources for the CRM bulk import subsystem.

This module provides:
- Import job records holding submitted values and staging results
- The uploaded-file data source (CSV file -> staging table)
- A registry so further data sources can be plugged in
- REST endpoints and management commands driving the data sources
"""
