# accounting/exceptions.py
"""
Errors raised by the ledger engine.

Every engine failure is one of these four kinds. The command layer turns
them into CommandResult failures and the views into HTTP responses.

- ValidationError: malformed input, carries every violation found
- PeriodClosedError: no open accounting period covers the posting date
- ConfigurationError: the ledger is not set up (no numbering series, ...)
- ConcurrencyError: the transaction lost a write conflict; retry the whole call
"""


class LedgerError(Exception):
    """Base class for ledger engine errors."""

    code = "ledger_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    @property
    def errors(self) -> list[str]:
        return [self.message] if self.message else []


class ValidationError(LedgerError):
    """Input rejected before anything was written."""

    code = "validation_error"

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self._errors = list(errors)
        super().__init__("; ".join(self._errors))

    @property
    def errors(self) -> list[str]:
        return list(self._errors)


class PeriodClosedError(LedgerError):
    """No open accounting period for the requested date."""

    code = "period_closed"

    def __init__(self, posting_date, business_unit_id=None):
        self.posting_date = posting_date
        self.business_unit_id = business_unit_id
        super().__init__(f"No open accounting period found for {posting_date}.")


class ConfigurationError(LedgerError):
    """The ledger is missing required setup for this business unit."""

    code = "configuration_error"


class ConcurrencyError(LedgerError):
    """A concurrent write conflicted with this transaction. Safe to retry from scratch."""

    code = "concurrency_error"
