"""End-to-end scenarios: Helpdesk rules with '*' fallback."""

from __future__ import annotations

from tests._host_factory import CATEGORY, RESOLUTION, cf_key, make_catalog, make_queue, make_ticket
from turnstile.checker import MandatoryFieldChecker


class TestHelpdeskResolve:
    def test_helpdesk_missing_time_and_resolution(self, checker: MandatoryFieldChecker) -> None:
        ticket = make_ticket(queue="Helpdesk", status="open", time_worked=0)
        errors = checker.check({"Status": "resolved"}, ticket=ticket, to_status="resolved")
        assert [e.message for e in errors] == [
            "Time Worked is required when changing Status to resolved",
            "Resolution is required when changing Status to resolved",
        ]

    def test_helpdesk_satisfied(self, checker: MandatoryFieldChecker) -> None:
        ticket = make_ticket(queue="Helpdesk", status="open", ticket_id=5)
        submitted = {"Status": "resolved", "UpdateTimeWorked": "10", cf_key(RESOLUTION, 5): "Fixed"}
        assert checker.check(submitted, ticket=ticket, to_status="resolved") == []

    def test_helpdesk_does_not_require_category(self, checker: MandatoryFieldChecker) -> None:
        ticket = make_ticket(queue="Helpdesk", status="open", time_worked=5, values={"Resolution": ["Fixed"]})
        assert checker.check({"Status": "resolved"}, ticket=ticket, to_status="resolved") == []

    def test_support_falls_back_to_category(self, checker: MandatoryFieldChecker) -> None:
        ticket = make_ticket(queue="Support", status="open")
        errors = checker.check({"Status": "resolved"}, ticket=ticket, to_status="resolved")
        assert [e.message for e in errors] == ["Category is required when changing Status to resolved"]

    def test_support_create_resolved(self, checker: MandatoryFieldChecker) -> None:
        errors = checker.check(
            {"Status": "resolved", cf_key(CATEGORY): "Hardware"},
            queue=make_queue("Support"),
            from_status="new",
            to_status="resolved",
        )
        assert errors == []

    def test_other_transitions_unrestricted(self, checker: MandatoryFieldChecker) -> None:
        ticket = make_ticket(queue="Helpdesk", status="new", catalog=make_catalog())
        assert checker.check({"Status": "open"}, ticket=ticket, to_status="open") == []
