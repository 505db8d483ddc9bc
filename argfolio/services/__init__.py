# argfolio/services/__init__.py
"""
Service layer for business logic.

Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions for I/O and lookup failures
- Report data-quality findings as warnings in their results
- Receive their collaborators (store, sources) via the constructor

Architecture:
    services/
    ├── __init__.py                # This file
    ├── exceptions.py              # Domain exceptions
    ├── constants.py               # Business constants
    ├── protocols.py               # Collaborator interfaces (Protocol classes)
    ├── storage/                   # Document store + typed repository
    ├── fx/                        # FX resolver and live/cached rate service
    ├── market_data/               # dolarapi, CoinGecko, Yahoo sources + price service
    ├── ledger/                    # Average-cost ledger, cash legs, debts
    ├── yield_accrual/             # Daily interest engine + scheduler service
    ├── fixed_deposits/            # Plazo fijo positions and settlement
    ├── valuation/                 # Holdings valuation and portfolio totals
    ├── snapshots.py               # Daily snapshot upsert
    ├── backup.py                  # Export / import
    └── remote_sync.py             # Optional remote push / bootstrap

Usage:
    from argfolio.services.valuation import ValuationService
    from argfolio.services.exceptions import AccountNotFoundError
"""
