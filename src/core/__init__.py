"""Core domain package for domainsheet.

Core contains the status matrix, header parsing, and reconciliation logic
without any workbook or network-specific code, keeping the business logic
portable.
"""
