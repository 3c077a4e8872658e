# accounting/management/commands/setup_ledger.py
"""
Bootstrap the ledger of a business unit.

Usage:
    # Numbering series only (JE-, ARI-, API-, IP-, OP-)
    python manage.py setup_ledger "Main Street Bistro"

    # Also seed a restaurant chart of accounts, designate Receivable /
    # Payable, open a period for the year and make a user the owner
    python manage.py setup_ledger "Main Street Bistro" --seed-chart --open-year 2026 \
        --owner-email owner@example.com
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import BusinessUnit, BusinessUnitMembership, User
from accounting.models import Account, AccountingPeriod, DefaultAccount, NumberingSeries
from accounting.write_barrier import bootstrap_writes_allowed


AccountType = Account.AccountType

RESTAURANT_CHART = [
    ("1000", "Cash on Hand", AccountType.ASSET),
    ("1010", "Bank Account", AccountType.ASSET),
    ("1200", "Accounts Receivable", AccountType.ASSET),
    ("1300", "Food and Beverage Inventory", AccountType.ASSET),
    ("1500", "Kitchen Equipment", AccountType.ASSET),
    ("2000", "Accounts Payable", AccountType.LIABILITY),
    ("2100", "Sales Tax Payable", AccountType.LIABILITY),
    ("3000", "Owner's Equity", AccountType.EQUITY),
    ("4000", "Food Sales", AccountType.REVENUE),
    ("4100", "Beverage Sales", AccountType.REVENUE),
    ("4200", "Catering Revenue", AccountType.REVENUE),
    ("5000", "Cost of Food Sold", AccountType.EXPENSE),
    ("5100", "Wages Expense", AccountType.EXPENSE),
    ("5200", "Rent Expense", AccountType.EXPENSE),
    ("5300", "Utilities Expense", AccountType.EXPENSE),
]

DEFAULT_ACCOUNT_CODES = {
    DefaultAccount.Role.RECEIVABLE: "1200",
    DefaultAccount.Role.PAYABLE: "2000",
}


class Command(BaseCommand):
    help = "Create numbering series (and optionally a chart of accounts) for a business unit"

    def add_arguments(self, parser):
        parser.add_argument("business_unit", type=str, help="Business unit name (created if missing)")
        parser.add_argument("--currency", type=str, default="USD")
        parser.add_argument(
            "--seed-chart",
            action="store_true",
            help="Seed a restaurant chart of accounts and designate Receivable / Payable",
        )
        parser.add_argument(
            "--open-year",
            type=int,
            help="Open one accounting period covering this calendar year",
        )
        parser.add_argument(
            "--owner-email",
            type=str,
            help="Existing user to make OWNER of the business unit",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        unit, created = BusinessUnit.objects.get_or_create(
            name=options["business_unit"],
            defaults={"currency": options["currency"]},
        )
        self.stdout.write(f"{'Created' if created else 'Using'} business unit {unit.name} (id={unit.id})")

        with bootstrap_writes_allowed():
            series_created = 0
            for kind, prefix in NumberingSeries.DEFAULT_PREFIXES.items():
                _, was_created = NumberingSeries.objects.get_or_create(
                    business_unit=unit,
                    document_kind=kind,
                    defaults={"prefix": prefix, "next_number": 1},
                )
                series_created += int(was_created)
        self.stdout.write(f"Numbering series: {series_created} created")

        if options["seed_chart"]:
            self._seed_chart(unit)

        if options["open_year"]:
            self._open_year(unit, options["open_year"])

        if options["owner_email"]:
            self._add_owner(unit, options["owner_email"])

        self.stdout.write(self.style.SUCCESS(f"Ledger ready for {unit.name}."))

    def _seed_chart(self, unit):
        accounts_created = 0
        for code, name, account_type in RESTAURANT_CHART:
            _, was_created = Account.objects.get_or_create(
                business_unit=unit,
                code=code,
                defaults={"name": name, "account_type": account_type},
            )
            accounts_created += int(was_created)
        self.stdout.write(f"Chart of accounts: {accounts_created} accounts created")

        for role, code in DEFAULT_ACCOUNT_CODES.items():
            DefaultAccount.objects.get_or_create(
                business_unit=unit,
                role=role,
                defaults={"account": Account.objects.get(business_unit=unit, code=code)},
            )
        self.stdout.write("Designated Receivable 1200 and Payable 2000")

    def _open_year(self, unit, year):
        start, end = date(year, 1, 1), date(year, 12, 31)
        overlapping = AccountingPeriod.objects.filter(
            business_unit=unit,
            start_date__lte=end,
            end_date__gte=start,
        ).exists()
        if overlapping:
            self.stdout.write(self.style.WARNING(f"A period already covers part of {year}; skipped"))
            return
        AccountingPeriod.objects.create(business_unit=unit, name=f"FY{year}", start_date=start, end_date=end)
        self.stdout.write(f"Opened period FY{year}")

    def _add_owner(self, unit, email):
        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            raise CommandError(f"User {email} not found")

        BusinessUnitMembership.objects.update_or_create(
            business_unit=unit,
            user=user,
            defaults={"role": BusinessUnitMembership.Role.OWNER, "is_active": True},
        )
        if user.active_business_unit_id is None:
            user.active_business_unit = unit
            user.save(update_fields=["active_business_unit"])
        self.stdout.write(f"{email} is OWNER of {unit.name}")
