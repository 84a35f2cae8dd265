"""Concrete wrappers around external programs and files."""
