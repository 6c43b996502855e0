"""
Persistence adapters.

Routers and services depend on these repositories; only they touch the remote
files, always inside one storage session per operation.
"""
