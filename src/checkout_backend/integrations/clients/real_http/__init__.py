"""
Real HTTP integration clients.

These clients talk to the merchant backend over HTTP.

Important:
- Must implement the same interface as the local clients
- Must return data shaped according to checkout_backend/integrations/contracts/*
"""
