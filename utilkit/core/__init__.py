"""
Core - Library infrastructure.

- config/      - Settings and factory functions
- interfaces/  - Protocols for DI
- connectors/  - Memory manager implementations (CPython, Manual)
- errors.py    - Error hierarchy
"""
