import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("accounting", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="BankAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("bank_name", models.CharField(blank=True, default="", max_length=100)),
                ("account_number", models.CharField(blank=True, default="", max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bank_accounts", to="accounts.businessunit")),
                ("gl_account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="bank_accounts", to="accounting.account")),
            ],
            options={
                "ordering": ["name"],
                "constraints": [models.UniqueConstraint(fields=("business_unit", "name"), name="uniq_bank_account_name")],
            },
        ),
        migrations.CreateModel(
            name="ARInvoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("document_number", models.CharField(max_length=50)),
                ("partner_code", models.CharField(max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("posting_date", models.DateField()),
                ("remarks", models.CharField(blank=True, default="", max_length=500)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("status", models.CharField(choices=[("OPEN", "Open"), ("CLOSED", "Closed")], default="OPEN", max_length=10)),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="arinvoices", to="accounts.businessunit")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("journal_entry", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="accounting.journalentry")),
            ],
            options={
                "verbose_name": "A/R invoice",
                "ordering": ["-posting_date", "-id"],
                "abstract": False,
                "constraints": [models.UniqueConstraint(fields=("business_unit", "document_number"), name="uniq_ar_invoice_number")],
            },
        ),
        migrations.CreateModel(
            name="ARInvoiceItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("quantity", models.DecimalField(decimal_places=4, default=Decimal("1"), max_digits=18)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=18)),
                ("line_total", models.DecimalField(decimal_places=2, max_digits=18)),
                ("account", models.ForeignKey(help_text="Revenue account credited for this item", on_delete=django.db.models.deletion.PROTECT, related_name="ar_invoice_items", to="accounting.account")),
                ("invoice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="financials.arinvoice")),
            ],
            options={
                "ordering": ["id"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="APInvoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("document_number", models.CharField(max_length=50)),
                ("partner_code", models.CharField(max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("posting_date", models.DateField()),
                ("remarks", models.CharField(blank=True, default="", max_length=500)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("status", models.CharField(choices=[("OPEN", "Open"), ("CLOSED", "Closed")], default="OPEN", max_length=10)),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="apinvoices", to="accounts.businessunit")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("journal_entry", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="accounting.journalentry")),
            ],
            options={
                "verbose_name": "A/P invoice",
                "ordering": ["-posting_date", "-id"],
                "abstract": False,
                "constraints": [models.UniqueConstraint(fields=("business_unit", "document_number"), name="uniq_ap_invoice_number")],
            },
        ),
        migrations.CreateModel(
            name="APInvoiceItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("quantity", models.DecimalField(decimal_places=4, default=Decimal("1"), max_digits=18)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=18)),
                ("line_total", models.DecimalField(decimal_places=2, max_digits=18)),
                ("account", models.ForeignKey(help_text="Expense or asset account debited for this item", on_delete=django.db.models.deletion.PROTECT, related_name="ap_invoice_items", to="accounting.account")),
                ("invoice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="financials.apinvoice")),
            ],
            options={
                "ordering": ["id"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="IncomingPayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("document_number", models.CharField(max_length=50)),
                ("partner_code", models.CharField(max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("payment_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("remarks", models.CharField(blank=True, default="", max_length=500)),
                ("bank_account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="incoming_payments", to="financials.bankaccount")),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="incomingpayments", to="accounts.businessunit")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("invoice", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="financials.arinvoice")),
                ("journal_entry", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="accounting.journalentry")),
            ],
            options={
                "ordering": ["-payment_date", "-id"],
                "abstract": False,
                "constraints": [
                    models.UniqueConstraint(fields=("business_unit", "document_number"), name="uniq_incoming_payment_number"),
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="chk_incoming_payment_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OutgoingPayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("document_number", models.CharField(max_length=50)),
                ("partner_code", models.CharField(max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("payment_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("remarks", models.CharField(blank=True, default="", max_length=500)),
                ("bank_account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="outgoing_payments", to="financials.bankaccount")),
                ("business_unit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="outgoingpayments", to="accounts.businessunit")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("invoice", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="financials.apinvoice")),
                ("journal_entry", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="accounting.journalentry")),
            ],
            options={
                "ordering": ["-payment_date", "-id"],
                "abstract": False,
                "constraints": [
                    models.UniqueConstraint(fields=("business_unit", "document_number"), name="uniq_outgoing_payment_number"),
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="chk_outgoing_payment_positive"),
                ],
            },
        ),
    ]
