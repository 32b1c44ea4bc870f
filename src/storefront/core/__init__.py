"""Core components of the storefront.

This package provides the exception taxonomy and the Result type that every
repository and service uses to report success or failure.
"""
