"""
Shared utilities: logging, error handling and input debouncing.
"""
