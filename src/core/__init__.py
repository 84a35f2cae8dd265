"""Core: settings, domain, contracts and the operations controller.

The core never prints; it raises `VipVpnError` subclasses and leaves output
and exit codes to the CLI.
"""
