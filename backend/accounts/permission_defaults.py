# accounts/permission_defaults.py

ROLE_DEFAULTS = {
    "OWNER": {
        # Chart of accounts
        "accounts.view",
        "accounts.manage",

        # Journal
        "journal.view",
        "journal.post",
        "journal.approve",

        # Periods & numbering
        "periods.view",
        "periods.manage",
        "periods.close",
        "numbering.manage",

        # Source documents
        "financials.view",
        "financials.create",

        # Reports
        "reports.view",
        "reports.export",
    },
    "ADMIN": {
        "accounts.view",
        "accounts.manage",
        "journal.view",
        "journal.post",
        "journal.approve",
        "periods.view",
        "periods.manage",
        "periods.close",
        "numbering.manage",
        "financials.view",
        "financials.create",
        "reports.view",
        "reports.export",
    },
    "ACCOUNTANT": {
        "accounts.view",
        "journal.view",
        "journal.post",
        "periods.view",
        "financials.view",
        "financials.create",
        "reports.view",
        "reports.export",
    },
    "VIEWER": {
        "accounts.view",
        "journal.view",
        "periods.view",
        "financials.view",
        "reports.view",
    },
}


def permissions_for_role(role: str) -> frozenset:
    return frozenset(ROLE_DEFAULTS.get(role, set()))


def all_permission_codes() -> set[str]:
    codes = set()
    for role_codes in ROLE_DEFAULTS.values():
        codes.update(role_codes)
    return codes
