"""
Contracts (data models).

This folder defines the shapes exchanged with the merchant backend and handed
back to callers:
- saved cards and the source variants produced by the payment SDK
- client configuration / in-memory state
- result records for every client operation

Both the local (mock) and remote (real HTTP) clients use these contracts, so
callers never branch on which backend is active.
"""
