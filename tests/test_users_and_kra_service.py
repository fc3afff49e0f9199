"""Tests for UserService and KraService over the in-memory store."""

import pytest

from app.db.store import Collections
from app.exceptions import DuplicateRecord, InvalidTransition, PermissionDenied, WeightBudgetExceeded
from app.models.employee import EmployeeCreate, EmployeeUpdate, Role
from app.models.kra import AssignmentState, KraAction, KraTemplateCreate, KraTemplateUpdate
from app.services.kra import KraService
from app.services.users import UserService


def new_user(**overrides):
    data = dict(employee_code="EMP020", name="Neha Gupta", email="neha@example.com",
                password="welcome1", department="Sales")
    data.update(overrides)
    return EmployeeCreate(**data)


class TestUserService:
    async def test_hr_creates_employee(self, store, people):
        created = await UserService(store).create(people["hr"], new_user(email="Neha@Example.com"))

        stored = await store.get(Collections.USERS, created.id)
        assert stored["email"] == "neha@example.com"
        assert stored["password_hash"] != "welcome1"
        assert stored["role"] == "employee"

    async def test_cannot_create_peer_role(self, store, people):
        with pytest.raises(PermissionDenied):
            await UserService(store).create(people["hr"], new_user(role=Role.HR))

    async def test_employee_cannot_create(self, store, people):
        with pytest.raises(PermissionDenied):
            await UserService(store).create(people["sales"], new_user())

    async def test_duplicate_email_and_code(self, store, people):
        users = UserService(store)
        with pytest.raises(DuplicateRecord):
            await users.create(people["admin"], new_user(email="rohan@example.com"))
        with pytest.raises(DuplicateRecord):
            await users.create(people["admin"], new_user(employee_code="EMP010"))

    async def test_subordinates_sorted_by_code_number(self, store, people):
        subordinates = await UserService(store).list_subordinates(people["super"])
        assert [e.employee_code for e in subordinates] == ["EMP002", "EMP003", "EMP9", "EMP010"]

    async def test_hr_sees_only_lower_roles(self, store, people):
        subordinates = await UserService(store).list_subordinates(people["hr"])
        assert {e.employee_code for e in subordinates} == {"EMP9", "EMP010"}

    async def test_update_profile(self, store, people):
        updated = await UserService(store).update(
            people["hr"], people["sales"].id, EmployeeUpdate(designation="Area Manager", ctc=720000)
        )
        assert updated.designation == "Area Manager"
        stored = await store.get(Collections.USERS, people["sales"].id)
        assert stored["ctc"] == 720000
        assert stored["name"] == "Rohan Das"

    async def test_cannot_promote_to_own_role(self, store, people):
        with pytest.raises(PermissionDenied):
            await UserService(store).update(people["hr"], people["sales"].id, EmployeeUpdate(role=Role.HR))

    async def test_block_and_unblock(self, store, people):
        users = UserService(store)
        blocked = await users.set_blocked(people["admin"], people["sales"].id, True)
        assert blocked.is_blocked
        assert (await store.get(Collections.USERS, people["sales"].id))["is_blocked"] is True

        await users.set_blocked(people["admin"], people["sales"].id, False)
        assert (await store.get(Collections.USERS, people["sales"].id))["is_blocked"] is False

    async def test_cannot_block_self_or_superior(self, store, people):
        users = UserService(store)
        with pytest.raises(PermissionDenied):
            await users.set_blocked(people["admin"], people["admin"].id, True)
        with pytest.raises(PermissionDenied):
            await users.set_blocked(people["hr"], people["admin"].id, True)

    async def test_authenticate(self, store, people):
        users = UserService(store)
        assert (await users.authenticate("ROHAN@example.com", "secret123")).id == people["sales"].id
        assert await users.authenticate("rohan@example.com", "wrong") is None
        assert await users.authenticate("nobody@example.com", "secret123") is None


class TestTemplates:
    async def test_mandatory_budget_enforced(self, store, people, sales_templates):
        data = KraTemplateCreate(title="Collections", department="Sales", is_mandatory=True, weightage=50)
        with pytest.raises(WeightBudgetExceeded):
            await KraService(store).create_template(people["hr"], data)

    async def test_employee_cannot_create_templates(self, store, people):
        data = KraTemplateCreate(title="Collections", department="Sales", weightage=10)
        with pytest.raises(PermissionDenied):
            await KraService(store).create_template(people["sales"], data)

    async def test_edit_excludes_itself_from_budget(self, store, people, sales_templates):
        service = KraService(store)
        updated = await service.update_template(
            people["hr"], sales_templates["revenue"].id, KraTemplateUpdate(weightage=100)
        )
        assert updated.weightage == 100
        assert (await service.get_template(sales_templates["revenue"].id)).weightage == 100

    async def test_making_template_mandatory_checks_budget(self, store, people, sales_templates):
        with pytest.raises(WeightBudgetExceeded):
            await KraService(store).update_template(
                people["hr"], sales_templates["accounts"].id, KraTemplateUpdate(is_mandatory=True)
            )

    async def test_list_by_department(self, store, sales_templates):
        titles = [t.title for t in await KraService(store).list_templates("Sales")]
        assert titles == ["Revenue", "Lead conversion", "New accounts"]

    async def test_watch_emits_after_change(self, store, people, sales_templates):
        service = KraService(store)
        watcher = service.watch_templates("Finance")
        assert [t.title for t in await watcher.__anext__()] == ["Audit closure"]

        await service.create_template(
            people["hr"], KraTemplateCreate(title="Month-end close", department="Finance", weightage=20)
        )
        assert [t.title for t in await watcher.__anext__()] == ["Audit closure", "Month-end close"]
        await watcher.aclose()


class TestSelectionWorkflow:
    async def test_request_approve_remove(self, store, people, sales_templates):
        service = KraService(store)
        leads = sales_templates["leads"].id

        report = await service.request(people["sales"], leads)
        assert report.total_weightage == 90
        assert [k.state for k in report.kras] == [AssignmentState.MANDATORY, AssignmentState.PENDING]

        report = await service.decide(people["hr"], people["sales"].id, leads, KraAction.APPROVE)
        assert report.kras[1].state == AssignmentState.APPROVED
        stored = await store.get(Collections.USERS, people["sales"].id)
        assert stored["kras"][0]["status"] == "approved"

        with pytest.raises(InvalidTransition):
            await service.withdraw(people["sales"], leads)

        report = await service.decide(people["hr"], people["sales"].id, leads, KraAction.REMOVE)
        assert report.total_weightage == 60
        assert (await store.get(Collections.USERS, people["sales"].id))["kras"] == []

    async def test_request_over_budget(self, store, people, sales_templates):
        service = KraService(store)
        await service.request(people["sales"], sales_templates["leads"].id)
        with pytest.raises(WeightBudgetExceeded):
            await service.request(people["sales"], sales_templates["accounts"].id)

    async def test_withdraw_and_reject(self, store, people, sales_templates):
        service = KraService(store)
        await service.request(people["sales"], sales_templates["leads"].id)
        report = await service.withdraw(people["sales"], sales_templates["leads"].id)
        assert report.total_weightage == 60

        await service.request(people["sales"], sales_templates["leads"].id)
        report = await service.decide(people["hr"], people["sales"].id, sales_templates["leads"].id, KraAction.REJECT)
        assert len(report.kras) == 1

    async def test_only_managers_decide(self, store, people, sales_templates):
        service = KraService(store)
        await service.request(people["sales"], sales_templates["leads"].id)
        with pytest.raises(PermissionDenied):
            await service.decide(people["sales2"], people["sales"].id, sales_templates["leads"].id, KraAction.APPROVE)

    async def test_goal_report_access(self, store, people, sales_templates):
        service = KraService(store)
        assert (await service.goal_report(people["sales"], people["sales"].id)).department == "Sales"
        with pytest.raises(PermissionDenied):
            await service.goal_report(people["sales2"], people["sales"].id)


class TestGoalReportExport:
    async def test_csv_rows(self, store, people, sales_templates):
        service = KraService(store)
        await service.request(people["sales"], sales_templates["leads"].id)
        report = await service.goal_report(people["hr"], people["sales"].id)

        lines = KraService.goal_report_csv(report).strip().splitlines()
        assert lines == [
            "S.No,Title,Description,Type,Status,Weightage",
            "1,Revenue,,Mandatory,MANDATORY,60%",
            "2,Lead conversion,,Optional,PENDING,30%",
        ]
