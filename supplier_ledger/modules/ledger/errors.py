# supplier_ledger/modules/ledger/errors.py


class DomainError(Exception):
    """Domain-level error the caller/UI can surface (blocking message, no state change)."""
    pass
