# accounting/numbering.py
"""
Document numbering.

Numbers are allocated from a NumberingSeries row locked with
select_for_update, inside the caller's transaction. A rolled-back caller
rolls back its allocation too, so numbers can have gaps but are never
handed out twice.
"""

import logging

from django.db import transaction

from accounting.exceptions import ConfigurationError
from accounting.models import NumberingSeries
from accounting.write_barrier import command_writes_allowed


logger = logging.getLogger(__name__)


def format_document_number(prefix: str, number: int) -> str:
    return f"{prefix}{number}"


@transaction.atomic
def next_number(document_kind: str, business_unit_id: int) -> str:
    """
    Allocate the next document number for a (kind, business unit) pair.

    Raises:
        ConfigurationError: If no series is configured for the pair
    """
    try:
        series = NumberingSeries.objects.select_for_update().get(
            document_kind=document_kind,
            business_unit_id=business_unit_id,
        )
    except NumberingSeries.DoesNotExist:
        raise ConfigurationError(
            f"No numbering series configured for {document_kind} "
            f"in business unit {business_unit_id}."
        )

    number = format_document_number(series.prefix, series.next_number)
    series.next_number += 1
    with command_writes_allowed():
        series.save(update_fields=["next_number", "updated_at"])

    logger.debug(f"Allocated {number} for {document_kind} in business unit {business_unit_id}")
    return number


def configure_series(
    business_unit_id: int,
    document_kind: str,
    prefix: str | None = None,
    next_number_value: int = 1,
) -> tuple[NumberingSeries, bool]:
    """
    Create a numbering series, or update the prefix of an existing one.

    The counter of an existing series is never moved backwards.
    """
    if prefix is None:
        prefix = NumberingSeries.DEFAULT_PREFIXES.get(document_kind, "")

    with transaction.atomic(), command_writes_allowed():
        series = NumberingSeries.objects.select_for_update().filter(
            document_kind=document_kind,
            business_unit_id=business_unit_id,
        ).first()
        if series is None:
            series = NumberingSeries.objects.create(
                business_unit_id=business_unit_id,
                document_kind=document_kind,
                prefix=prefix,
                next_number=next_number_value,
            )
            return series, True

        series.prefix = prefix
        series.next_number = max(series.next_number, next_number_value)
        series.save(update_fields=["prefix", "next_number", "updated_at"])
        return series, False
