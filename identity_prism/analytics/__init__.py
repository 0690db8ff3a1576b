"""
Wallet analytics: asset classification, trait aggregation, scoring and the
snapshot builder that runs them over fresh ledger data.
"""
