"""Tests for the KRA weight budget and approval state machine (app/core/kra.py)."""

from datetime import datetime

import pytest

from app.core import kra as rules
from app.exceptions import InvalidTransition, NotFound, ValidationFailed, WeightBudgetExceeded
from app.models.employee import Employee, KraAssignment, KraStatus
from app.models.kra import AssignmentState, KraTemplate


def template(id, weightage, mandatory=False, department="Sales"):
    return KraTemplate(id=id, title=id.title(), department=department, is_mandatory=mandatory, weightage=weightage)


def employee(*kras, department="Sales"):
    return Employee(
        id="u1", employee_code="EMP010", name="Rohan Das", email="rohan@example.com",
        department=department, kras=list(kras),
    )


def pending(kra_id):
    return KraAssignment(kra_id=kra_id, status=KraStatus.PENDING)


def approved(kra_id):
    return KraAssignment(kra_id=kra_id, status=KraStatus.APPROVED)


TEMPLATES = [
    template("revenue", 60, mandatory=True),
    template("leads", 40),
    template("accounts", 50),
    template("audit", 10, department="Finance"),
]


class TestTemplateBudget:
    def test_mandatory_over_budget_rejected(self):
        existing = [template("a", 40, mandatory=True), template("b", 30, mandatory=True)]
        with pytest.raises(WeightBudgetExceeded) as exc:
            rules.check_template_budget(existing, "Sales", True, 50)
        assert exc.value.current == 70
        assert "70%" in exc.value.message

    def test_optional_templates_are_not_budgeted(self):
        existing = [template("a", 100, mandatory=True)]
        rules.check_template_budget(existing, "Sales", False, 80)

    def test_editing_excludes_the_edited_template(self):
        existing = [template("a", 70, mandatory=True)]
        rules.check_template_budget(existing, "Sales", True, 100, editing_id="a")

    def test_other_departments_do_not_count(self):
        existing = [template("a", 90, mandatory=True, department="Finance")]
        rules.check_template_budget(existing, "Sales", True, 100)


class TestRequest:
    def test_request_within_budget_is_pending(self):
        kras = rules.request_kra(employee(), TEMPLATES, "leads", now=datetime(2024, 5, 1))
        assert kras == [KraAssignment(kra_id="leads", status=KraStatus.PENDING, requested_at=datetime(2024, 5, 1))]

    def test_request_over_budget_rejected(self):
        with pytest.raises(WeightBudgetExceeded):
            rules.request_kra(employee(), TEMPLATES, "accounts")

    def test_pending_selections_count_towards_budget(self):
        templates = TEMPLATES + [template("small", 10)]
        with pytest.raises(WeightBudgetExceeded):
            rules.request_kra(employee(pending("leads")), templates, "small")

    def test_mandatory_cannot_be_requested(self):
        with pytest.raises(ValidationFailed):
            rules.request_kra(employee(), TEMPLATES, "revenue")

    def test_other_department_cannot_be_requested(self):
        with pytest.raises(ValidationFailed):
            rules.request_kra(employee(), TEMPLATES, "audit")

    def test_duplicate_request_rejected(self):
        with pytest.raises(InvalidTransition):
            rules.request_kra(employee(pending("leads")), TEMPLATES, "leads")

    def test_unknown_template(self):
        with pytest.raises(NotFound):
            rules.request_kra(employee(), TEMPLATES, "missing")


class TestTransitions:
    def test_withdraw_pending(self):
        assert rules.withdraw_kra(employee(pending("leads")), "leads") == []

    def test_withdraw_approved_is_locked(self):
        with pytest.raises(InvalidTransition):
            rules.withdraw_kra(employee(approved("leads")), "leads")

    def test_approve_pending(self):
        kras = rules.approve_kra(employee(pending("leads")), "leads")
        assert kras[0].status == KraStatus.APPROVED

    def test_approve_twice_rejected(self):
        with pytest.raises(InvalidTransition):
            rules.approve_kra(employee(approved("leads")), "leads")

    def test_reject_drops_the_request(self):
        assert rules.reject_kra(employee(pending("leads"), approved("accounts")), "leads") == [approved("accounts")]

    def test_remove_approved(self):
        assert rules.remove_kra(employee(approved("leads")), TEMPLATES, "leads") == []

    def test_remove_pending_rejected(self):
        with pytest.raises(InvalidTransition):
            rules.remove_kra(employee(pending("leads")), TEMPLATES, "leads")

    def test_mandatory_cannot_be_removed(self):
        with pytest.raises(InvalidTransition):
            rules.remove_kra(employee(approved("revenue")), TEMPLATES, "revenue")

    def test_transitions_do_not_mutate_the_employee(self):
        emp = employee(pending("leads"))
        rules.approve_kra(emp, "leads")
        assert emp.kras[0].status == KraStatus.PENDING


class TestWeightAndActiveSet:
    def test_total_weight_deduplicates_mandatory(self):
        # A legacy record listing a mandatory id is counted once
        emp = Employee.model_validate({
            "id": "u1", "employee_code": "EMP010", "name": "Rohan", "email": "rohan@example.com",
            "department": "Sales", "kras": ["revenue", "leads"],
        })
        assert rules.total_weight(emp, TEMPLATES) == 100

    def test_legacy_strings_read_as_approved(self):
        emp = Employee.model_validate({
            "employee_code": "EMP010", "name": "Rohan", "email": "rohan@example.com",
            "department": "Sales", "kras": ["leads"],
        })
        assert emp.kras == [approved("leads")]

    def test_active_kras_excludes_pending(self):
        emp = employee(pending("leads"))
        assert [t.id for t in rules.active_kras(emp, TEMPLATES)] == ["revenue"]

    def test_active_kras_includes_approved(self):
        emp = employee(approved("leads"))
        assert [t.id for t in rules.active_kras(emp, TEMPLATES)] == ["revenue", "leads"]

    def test_goal_report_states(self):
        rows = rules.employee_kras(employee(approved("leads"), pending("accounts")), TEMPLATES)
        assert [(r.kra_id, r.state) for r in rows] == [
            ("revenue", AssignmentState.MANDATORY),
            ("leads", AssignmentState.APPROVED),
            ("accounts", AssignmentState.PENDING),
        ]
