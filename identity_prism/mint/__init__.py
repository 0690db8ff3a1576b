"""
Mint-side contracts: pending mint requests, the metadata document the mint
consumes and the client for the metadata storage service.
"""
