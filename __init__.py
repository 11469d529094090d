"""Finance Dashboard package.

Backend for a personal finance dashboard: it reads linked banks from the
database, pulls live balances and transactions from Plaid and returns
account summaries and merged transaction feeds.  See ``api_server.py``
for the HTTP entry point and ``seed_db.py`` for demo data.
"""
