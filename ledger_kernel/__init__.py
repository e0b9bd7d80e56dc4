"""
Ledger Kernel

Multi-currency customer ledger core:
- Frozen exchange rates on every record
- Deterministic running-balance statements
- Row-locked cash/bank account postings
- Typed errors for every rejected operation
"""

__version__ = "0.1.0"
