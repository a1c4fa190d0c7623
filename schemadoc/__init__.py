"""schemadoc: MySQL schema metadata -> CSV -> formatted Google Sheets documentation."""

__version__ = "0.1.0"
