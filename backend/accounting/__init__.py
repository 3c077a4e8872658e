# accounting/__init__.py
"""
Accounting app - the double-entry ledger.

This app provides:
- Account: chart of accounts with running balances
- JournalEntry / JournalLine: balanced postings
- AccountingPeriod: the period gate for posting dates
- NumberingSeries: per business unit document numbers
- Reports: trial balance, balance sheet, income statement

Journal entries are created only by accounting.ledger.post_entry.
"""
