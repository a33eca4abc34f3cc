"""Domain layer for ledgerbook application."""

# Services are resolved lazily: the database layer imports domain.entities,
# and the services import the database layer.
_SERVICES = {
    "ActivityLogService": "ledgerbook.domain.activity",
    "BalanceService": "ledgerbook.domain.balance",
    "BankAccountService": "ledgerbook.domain.account",
    "CategoryService": "ledgerbook.domain.category",
    "LedgerService": "ledgerbook.domain.ledger",
    "SnapshotService": "ledgerbook.domain.snapshot",
    "TransferService": "ledgerbook.domain.transfer",
    "VendorService": "ledgerbook.domain.vendor",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
