from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None


def summarize_dashboard(
    clients: Iterable[Dict[str, Any]],
    cases: Iterable[Dict[str, Any]],
    tasks: Iterable[Dict[str, Any]],
    appointments: Iterable[Dict[str, Any]],
    invoices: Iterable[Dict[str, Any]] = (),
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Aggregate the headline counts shown on the dashboard."""
    now = now or datetime.utcnow()
    clients: List[Dict[str, Any]] = list(clients)
    cases = list(cases)
    tasks = list(tasks)
    appointments = list(appointments)
    invoices = list(invoices)

    open_tasks = [task for task in tasks if not task.get("completed")]
    overdue_tasks = [
        task for task in open_tasks
        if (_parse_datetime(task.get("due_date")) or now) < now
    ]
    upcoming = [
        appointment for appointment in appointments
        if appointment.get("status") == "Scheduled"
        and (_parse_datetime(appointment.get("date_time")) or now) >= now
    ]
    outstanding = [invoice for invoice in invoices if invoice.get("status") != "Paid"]

    return {
        "total_clients": len(clients),
        "active_clients": sum(1 for client in clients if client.get("status")),
        "total_cases": len(cases),
        "important_cases": sum(1 for case in cases if case.get("is_important")),
        "completed_cases": sum(1 for case in cases if case.get("status") == "Completed"),
        "archived_cases": sum(1 for case in cases if case.get("is_archived")),
        "open_tasks": len(open_tasks),
        "overdue_tasks": len(overdue_tasks),
        "upcoming_appointments": len(upcoming),
        "outstanding_invoices": len(outstanding),
        "outstanding_balance": round(sum(invoice.get("balance_due") or 0 for invoice in outstanding), 2),
    }
