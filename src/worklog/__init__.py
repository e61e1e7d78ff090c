"""Worklog package.

Organized by feature modules (ledger, records, crypto, storage, days) with a
thin Flask controller layer on top of service/store layers.
"""
