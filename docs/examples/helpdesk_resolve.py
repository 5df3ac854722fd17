#!/usr/bin/env python3
"""Mandatory fields on resolve, with a per-queue rule and a '*' fallback.

This example walks a Helpdesk ticket and a Support ticket through a resolve
attempt using the in-memory host objects:

  - Helpdesk: '* -> resolved' requires TimeWorked and CF.Resolution
  - every other queue: '* -> resolved' requires CF.Category
  - A first attempt is blocked; a second attempt supplies the values

How to run:
    python docs/examples/helpdesk_resolve.py
"""

from __future__ import annotations

from turnstile import MandatoryFieldChecker, RuleTable
from turnstile.memory import CustomField, CustomFieldCatalog, PatternValidator, Ticket

RULES = {
    "Helpdesk": {"* -> resolved": ["TimeWorked", "CF.Resolution"]},
    "*": {"* -> resolved": "CF.Category"},
}


def attempt(checker: MandatoryFieldChecker, ticket: Ticket, submitted: dict[str, str]) -> None:
    errors = checker.check(submitted, ticket=ticket, to_status="resolved")
    if not errors:
        print(f"    [allowed] #{ticket.id} {ticket.status} -> resolved")
        return
    print(f"    [blocked] #{ticket.id} {ticket.status} -> resolved")
    for e in errors:
        print(f"      - {e.message}")


def main() -> None:
    catalog = CustomFieldCatalog([CustomField(id=1, name="Resolution"), CustomField(id=2, name="Category")])
    checker = MandatoryFieldChecker(RuleTable.from_config(RULES), PatternValidator())

    print("=== Helpdesk ticket ===")
    helpdesk = Ticket(id=101, status="open", queue_name="Helpdesk", catalog=catalog)
    prefix = checker.name_prefix(helpdesk)
    attempt(checker, helpdesk, {"Status": "resolved"})
    attempt(checker, helpdesk, {"Status": "resolved", "UpdateTimeWorked": "20", f"{prefix}1-Value": "Replaced fan"})

    print("\n=== Support ticket (falls back to '*') ===")
    support = Ticket(id=102, status="open", queue_name="Support", catalog=catalog)
    prefix = checker.name_prefix(support)
    attempt(checker, support, {"Status": "resolved"})
    attempt(checker, support, {"Status": "resolved", f"{prefix}2-Value": "Hardware"})


if __name__ == "__main__":
    main()
