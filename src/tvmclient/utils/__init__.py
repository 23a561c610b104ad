"""Utility modules for the TVM client."""
