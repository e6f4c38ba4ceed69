"""Provider-side view of assigned jobs."""

from core.models import ProviderJobSummary, RequestStatus, ServiceRequest


def summarize_jobs(jobs: list[ServiceRequest]) -> ProviderJobSummary:
    """
    Aggregate a provider's jobs.

    Earnings count the total price of completed jobs (tips excluded).
    Acceptance rate is the percentage of jobs not cancelled, 0 when there
    are no jobs.
    """
    completed = [j for j in jobs if j.status == RequestStatus.COMPLETED]
    cancelled = [j for j in jobs if j.status == RequestStatus.CANCELLED]
    active = [j for j in jobs if not j.status.is_terminal]

    acceptance_rate = 0.0
    if jobs:
        acceptance_rate = round((len(jobs) - len(cancelled)) / len(jobs) * 100, 1)

    return ProviderJobSummary(
        total_jobs=len(jobs),
        active_jobs=len(active),
        completed_jobs=len(completed),
        cancelled_jobs=len(cancelled),
        total_earnings_cents=sum(j.total_price_cents for j in completed),
        acceptance_rate=acceptance_rate,
    )
