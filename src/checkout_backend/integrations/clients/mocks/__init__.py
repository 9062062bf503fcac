"""
Local integration clients.

These clients never call an external API. They are used when:
- no merchant backend has been configured yet
- we want to exercise the checkout flow end-to-end without a backend

Important:
- Local clients implement the SAME interface as the real HTTP clients
  (contracts/interfaces.py) and return contract-shaped results.
"""
