# accounting/management/commands/verify_balances.py
"""
Replay journal lines and compare them with the running account balances.

Usage:
    python manage.py verify_balances --business-unit 1
    python manage.py verify_balances --all

Exits with an error when any mismatch is found.
"""

from django.core.management.base import BaseCommand, CommandError

from accounts.models import BusinessUnit
from accounting.balances import verify_account_balances


class Command(BaseCommand):
    help = "Verify running account balances against the journal line history"

    def add_arguments(self, parser):
        parser.add_argument("--business-unit", type=int, help="Business unit id")
        parser.add_argument("--all", action="store_true", help="Verify every active business unit")

    def handle(self, *args, **options):
        if options["all"]:
            unit_ids = list(BusinessUnit.objects.filter(is_active=True).values_list("id", flat=True))
        elif options["business_unit"]:
            if not BusinessUnit.objects.filter(pk=options["business_unit"]).exists():
                raise CommandError(f"Business unit {options['business_unit']} not found")
            unit_ids = [options["business_unit"]]
        else:
            raise CommandError("Specify --business-unit <id> or --all")

        total_mismatches = 0
        for unit_id in unit_ids:
            report = verify_account_balances(unit_id)
            self.stdout.write(
                f"Business unit {unit_id}: {report['verified']}/{report['total_accounts']} verified"
            )
            for mismatch in report["mismatches"]:
                self.stdout.write(self.style.ERROR(
                    f"  {mismatch['account_code']}: running {mismatch['running_balance']}, "
                    f"recomputed {mismatch['recomputed_balance']} "
                    f"(difference {mismatch['difference']})"
                ))
            total_mismatches += len(report["mismatches"])

        if total_mismatches:
            raise CommandError(f"{total_mismatches} balance mismatches found")
        self.stdout.write(self.style.SUCCESS("All balances verified."))
