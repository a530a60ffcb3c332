"""Properties app package.

Holds the rentable lofts, their pricing attributes and the owner/admin
imposed availability blocks (maintenance, renovation, manual blocks and
per-night pricing rules).
"""
