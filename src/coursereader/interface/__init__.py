"""
Interface layer package.

Command-line entry point and the catalog HTTP endpoint.
"""
