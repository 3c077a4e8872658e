"""
Celery tasks for ledger maintenance.

Tasks:
- verify_account_balances: Replay one business unit's journal lines and
  compare them with the running account balances
- verify_all_business_units: Run the verification for every active unit

Usage:
    from accounting.tasks import verify_account_balances
    verify_account_balances.delay(business_unit_id=unit.id)

    # Scheduled nightly through CELERY_BEAT_SCHEDULE in settings
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True,
)
def verify_account_balances(self, business_unit_id: int) -> dict:
    """
    Verify the running balances of one business unit.

    Returns:
        The verification report (see accounting.balances.verify_account_balances)
    """
    from accounts.models import BusinessUnit
    from accounting.balances import verify_account_balances as verify

    if not BusinessUnit.objects.filter(pk=business_unit_id).exists():
        logger.error(f"Business unit {business_unit_id} not found")
        return {"error": f"Business unit {business_unit_id} not found"}

    return verify(business_unit_id)


@shared_task(bind=True)
def verify_all_business_units(self) -> dict:
    """
    Verify balances for all active business units.

    Returns:
        Summary with the number of units checked and those with mismatches
    """
    from accounts.models import BusinessUnit

    logger.info("Verifying account balances for all business units")

    results = {}
    units_with_mismatches = []

    for unit in BusinessUnit.objects.filter(is_active=True).order_by("id"):
        try:
            report = verify_account_balances(business_unit_id=unit.id)
        except Exception as e:
            logger.exception(f"Error verifying business unit {unit.id}: {e}")
            results[unit.id] = {"error": str(e)}
            continue

        results[unit.id] = report
        if report.get("mismatches"):
            units_with_mismatches.append(unit.id)

    logger.info(
        f"Verified {len(results)} business units, "
        f"{len(units_with_mismatches)} with mismatches"
    )

    return {
        "business_units_checked": len(results),
        "business_units_with_mismatches": units_with_mismatches,
        "results": results,
    }
