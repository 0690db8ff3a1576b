"""
API server package: HTTP interface to the snapshot builder and mint preparation.
"""
