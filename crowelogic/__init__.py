"""
Persistence core and HTTP service for the Crowe Logic cultivation assistant.

Repositories for chats, tasks, farms, strains, environmental readings and
image analyses sit on top of a small key-value store interface that is
backed either by a hosted Redis-compatible service or by process memory.
"""
