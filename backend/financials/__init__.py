# financials/__init__.py
"""
Financials app - source documents posted to the ledger.

Bank accounts, A/R and A/P invoices and incoming/outgoing payments.
Creating a document posts its journal entry (see financials.postings).
"""
