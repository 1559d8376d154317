"""
Shared utilities: structured logging, the scan log and error handling.
"""
