"""
Common - Cross-cutting infrastructure shared by every package.

- logging/  - Structured logging, correlation context, YAML config
"""
