"""
Table ordering API: table sessions, order merging, pricing and billing.
"""
