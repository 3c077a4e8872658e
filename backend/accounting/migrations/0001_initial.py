import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                ("account_type", models.CharField(choices=[("ASSET", "Asset"), ("LIABILITY", "Liability"), ("EQUITY", "Equity"), ("REVENUE", "Revenue"), ("EXPENSE", "Expense")], db_column="type", max_length=20)),
                ("normal_balance", models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], editable=False, max_length=10)),
                ("description", models.TextField(blank=True, default="")),
                ("balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), editable=False, max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounts", to="accounts.businessunit")),
            ],
            options={
                "ordering": ["code"],
                "indexes": [models.Index(fields=["business_unit", "account_type"], name="idx_account_unit_type")],
                "constraints": [models.UniqueConstraint(fields=("business_unit", "code"), name="uniq_account_code_per_business_unit")],
            },
        ),
        migrations.CreateModel(
            name="AccountingPeriod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("status", models.CharField(choices=[("OPEN", "Open"), ("CLOSED", "Closed")], default="OPEN", max_length=10)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounting_periods", to="accounts.businessunit")),
                ("closed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="closed_periods", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["business_unit", "start_date"],
                "indexes": [models.Index(fields=["business_unit", "status", "start_date"], name="idx_period_unit_status_start")],
                "constraints": [models.CheckConstraint(condition=models.Q(("end_date__gte", models.F("start_date"))), name="chk_period_end_after_start")],
            },
        ),
        migrations.CreateModel(
            name="DefaultAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("RECEIVABLE", "Accounts Receivable"), ("PAYABLE", "Accounts Payable")], max_length=20)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="default_roles", to="accounting.account")),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="default_accounts", to="accounts.businessunit")),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("business_unit", "role"), name="uniq_default_account_role")],
            },
        ),
        migrations.CreateModel(
            name="NumberingSeries",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("document_kind", models.CharField(choices=[("JOURNAL_ENTRY", "Journal Entry"), ("AR_INVOICE", "A/R Invoice"), ("AP_INVOICE", "A/P Invoice"), ("INCOMING_PAYMENT", "Incoming Payment"), ("OUTGOING_PAYMENT", "Outgoing Payment")], max_length=30)),
                ("prefix", models.CharField(blank=True, default="", max_length=20)),
                ("next_number", models.PositiveBigIntegerField(default=1)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="numbering_series", to="accounts.businessunit")),
            ],
            options={
                "verbose_name_plural": "numbering series",
                "constraints": [models.UniqueConstraint(fields=("document_kind", "business_unit"), name="uniq_numbering_series_kind_business_unit")],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("document_number", models.CharField(max_length=50)),
                ("posting_date", models.DateField()),
                ("remarks", models.CharField(blank=True, default="", max_length=500)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("source_type", models.CharField(blank=True, default="", help_text="Document kind that produced this entry (e.g. AR_INVOICE)", max_length=30)),
                ("source_document", models.CharField(blank=True, default="", help_text="Document number of the source document", max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("approver", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="approved_journal_entries", to=settings.AUTH_USER_MODEL)),
                ("author", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="authored_journal_entries", to=settings.AUTH_USER_MODEL)),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="journal_entries", to="accounts.businessunit")),
                ("period", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="journal_entries", to="accounting.accountingperiod")),
            ],
            options={
                "verbose_name_plural": "journal entries",
                "ordering": ["-posting_date", "-id"],
                "indexes": [models.Index(fields=["business_unit", "posting_date", "id"], name="idx_entry_unit_date")],
                "constraints": [models.UniqueConstraint(fields=("business_unit", "document_number"), name="uniq_journal_entry_number_per_business_unit")],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("debit", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("credit", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="journal_lines", to="accounting.account")),
                ("entry", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="accounting.journalentry")),
            ],
            options={
                "ordering": ["entry", "line_no"],
                "indexes": [models.Index(fields=["account", "entry"], name="idx_line_account_entry")],
                "constraints": [
                    models.UniqueConstraint(fields=("entry", "line_no"), name="uniq_journal_line_no"),
                    models.CheckConstraint(condition=models.Q(models.Q(("debit__gt", 0), ("credit__gt", 0)), _negated=True), name="chk_line_not_both_debit_credit"),
                    models.CheckConstraint(condition=models.Q(models.Q(("debit__exact", 0), ("credit__exact", 0)), _negated=True), name="chk_line_not_both_zero"),
                    models.CheckConstraint(condition=models.Q(("debit__gte", 0), ("credit__gte", 0)), name="chk_line_non_negative"),
                ],
            },
        ),
    ]
