"""Core utilities and shared infrastructure.

- archive: In-memory zip reading and writing
- config: Configuration loading and validation
- constants: Marker prefix, KML element names, download naming
- exceptions: Custom exception hierarchy
- ingress: HTTP request validation and error rendering
"""
