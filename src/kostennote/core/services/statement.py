from __future__ import annotations

from datetime import date

from kostennote.core.models.result import CalculatedLine, TotalResult
from kostennote.utils.money import format_cents, format_euro


def _format_day(day: date | None) -> str:
    return day.strftime("%d.%m.%Y") if day else "-"


def _item(position: int, line: CalculatedLine) -> dict:
    return {
        "position": position,
        "service_id": line.service_id,
        "date": _format_day(line.date),
        "label": line.label,
        "section": line.section,
        "interval": line.interval,
        "vat_rate": line.vat_rate,
        "amount_cents": line.amount_cents,
        "amount": format_cents(line.amount_cents),
        "base_cents": line.base_cents,
        "is_court_fee": line.is_court_fee,
        "trace": line.trace,
    }


def build_statement_payload(
    result: TotalResult,
    *,
    issue_date: date,
    case_reference: str = "",
    client: dict | None = None,
    doc_title: str = "Kostenverzeichnis",
    include_traces: bool = True,
) -> dict:
    """
    Structured payload for the PDF/UI renderers.

    Amounts stay integer cents; every amount also comes preformatted in the
    Austrian notation so renderers never do arithmetic. The caller supplies
    ``issue_date``; the payload never reads the clock.
    """
    client = client or {}
    items = [_item(idx, line) for idx, line in enumerate(result.lines, start=1)]
    if not include_traces:
        for item in items:
            item.pop("trace")

    return {
        "doc_title": doc_title,
        "case_reference": case_reference or "-",
        "issue_date": _format_day(issue_date),
        "client": {
            "name": client.get("name") or client.get("company") or "-",
            "address": client.get("address") or "-",
            "email": client.get("email") or "",
        },
        "items": items,
        "totals": {
            "net_cents": result.net_cents,
            "vat_cents": result.vat_cents,
            "court_fee_cents": result.court_fee_cents,
            "total_cents": result.total_cents,
            "net": format_euro(result.net_cents),
            "vat": format_euro(result.vat_cents),
            "court_fees": format_euro(result.court_fee_cents),
            "total": format_euro(result.total_cents),
        },
    }
