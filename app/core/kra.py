"""
KRA Weight & Approval Rules
Pure functions over KRA templates and an employee's selections.

Per (KRA, employee) pair a KRA is either mandatory (department-wide, always
active) or moves none -> pending -> approved, with reject/withdraw/remove
returning it to none by dropping it from the employee's list. Every
function returns a new selection list; persisting it is the caller's job.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from app.exceptions import InvalidTransition, NotFound, ValidationFailed, WeightBudgetExceeded
from app.models.employee import Employee, KraAssignment, KraStatus
from app.models.kra import AssignmentState, EmployeeKra, KraTemplate


WEIGHT_BUDGET = 100


def _by_id(templates: Iterable[KraTemplate]) -> Dict[str, KraTemplate]:
    return {t.id: t for t in templates}


def mandatory_templates(templates: Iterable[KraTemplate], department: str) -> List[KraTemplate]:
    return [t for t in templates if t.department == department and t.is_mandatory]


def mandatory_weight(
    templates: Iterable[KraTemplate],
    department: str,
    exclude_id: Optional[str] = None,
) -> int:
    """Sum of mandatory weightage in a department, optionally ignoring one template"""
    return sum(t.weightage for t in mandatory_templates(templates, department) if t.id != exclude_id)


def check_template_budget(
    templates: Iterable[KraTemplate],
    department: str,
    is_mandatory: bool,
    weightage: int,
    editing_id: Optional[str] = None,
    budget: int = WEIGHT_BUDGET,
) -> None:
    """Reject a mandatory template that would push its department past the budget"""
    if not is_mandatory:
        return
    current = mandatory_weight(templates, department, exclude_id=editing_id)
    if current + weightage > budget:
        raise WeightBudgetExceeded(current, weightage, budget, department)


def _dedupe(templates: Iterable[KraTemplate]) -> List[KraTemplate]:
    seen: Dict[str, KraTemplate] = {}
    for t in templates:
        seen.setdefault(t.id, t)
    return list(seen.values())


def selected_templates(
    employee: Employee,
    templates: Iterable[KraTemplate],
    statuses: Iterable[KraStatus] = (KraStatus.PENDING, KraStatus.APPROVED),
) -> List[KraTemplate]:
    lookup = _by_id(templates)
    wanted = set(statuses)
    return [
        lookup[a.kra_id]
        for a in employee.kras
        if a.status in wanted and a.kra_id in lookup
    ]


def total_weight(employee: Employee, templates: Iterable[KraTemplate]) -> int:
    """Department mandatory weight plus the employee's pending/approved selections"""
    templates = list(templates)
    combined = _dedupe(mandatory_templates(templates, employee.department) + selected_templates(employee, templates))
    return sum(t.weightage for t in combined)


def active_kras(employee: Employee, templates: Iterable[KraTemplate]) -> List[KraTemplate]:
    """KRAs that count towards KPI scoring: mandatory plus approved selections"""
    templates = list(templates)
    return _dedupe(
        mandatory_templates(templates, employee.department)
        + selected_templates(employee, templates, statuses=(KraStatus.APPROVED,))
    )


def _find(assignments: List[KraAssignment], kra_id: str) -> Optional[KraAssignment]:
    return next((a for a in assignments if a.kra_id == kra_id), None)


def _template(templates: Iterable[KraTemplate], kra_id: str) -> KraTemplate:
    template = _by_id(templates).get(kra_id)
    if template is None:
        raise NotFound(f"KRA template {kra_id} not found")
    return template


def request_kra(
    employee: Employee,
    templates: Iterable[KraTemplate],
    kra_id: str,
    budget: int = WEIGHT_BUDGET,
    now: Optional[datetime] = None,
) -> List[KraAssignment]:
    """none -> pending, bounded by the weight budget"""
    templates = list(templates)
    template = _template(templates, kra_id)

    if template.is_mandatory:
        raise ValidationFailed("Mandatory KRAs are always active and cannot be selected")
    if template.department != employee.department:
        raise ValidationFailed(f"KRA '{template.title}' is not available for {employee.department}")
    if _find(employee.kras, kra_id):
        raise InvalidTransition(f"KRA '{template.title}' is already selected")

    current = total_weight(employee, templates)
    if current + template.weightage > budget:
        raise WeightBudgetExceeded(current, template.weightage, budget, employee.name)

    return list(employee.kras) + [
        KraAssignment(kra_id=kra_id, status=KraStatus.PENDING, requested_at=now or datetime.utcnow())
    ]


def withdraw_kra(employee: Employee, kra_id: str) -> List[KraAssignment]:
    """pending -> none; approved selections are locked for the employee"""
    existing = _find(employee.kras, kra_id)
    if existing is None:
        raise InvalidTransition("KRA is not selected")
    if existing.status == KraStatus.APPROVED:
        raise InvalidTransition("This goal is locked/approved. Contact a manager to remove it.")
    return [a for a in employee.kras if a.kra_id != kra_id]


def approve_kra(employee: Employee, kra_id: str) -> List[KraAssignment]:
    """pending -> approved"""
    existing = _find(employee.kras, kra_id)
    if existing is None or existing.status != KraStatus.PENDING:
        raise InvalidTransition("Only pending KRA requests can be approved")
    return [
        a.model_copy(update={"status": KraStatus.APPROVED}) if a.kra_id == kra_id else a
        for a in employee.kras
    ]


def reject_kra(employee: Employee, kra_id: str) -> List[KraAssignment]:
    """pending -> none; rejected requests are dropped, not kept"""
    existing = _find(employee.kras, kra_id)
    if existing is None or existing.status != KraStatus.PENDING:
        raise InvalidTransition("Only pending KRA requests can be rejected")
    return [a for a in employee.kras if a.kra_id != kra_id]


def remove_kra(employee: Employee, templates: Iterable[KraTemplate], kra_id: str) -> List[KraAssignment]:
    """approved -> none, for optional KRAs only"""
    template = _by_id(templates).get(kra_id)
    if template is not None and template.is_mandatory and template.department == employee.department:
        raise InvalidTransition("Mandatory KRAs cannot be removed")
    existing = _find(employee.kras, kra_id)
    if existing is None or existing.status != KraStatus.APPROVED:
        raise InvalidTransition("Only approved KRAs can be removed")
    return [a for a in employee.kras if a.kra_id != kra_id]


def employee_kras(employee: Employee, templates: Iterable[KraTemplate]) -> List[EmployeeKra]:
    """Goal report rows: mandatory first, then selections in request order"""
    templates = list(templates)
    rows = [
        EmployeeKra(
            kra_id=t.id,
            title=t.title,
            description=t.description,
            is_mandatory=True,
            weightage=t.weightage,
            state=AssignmentState.MANDATORY,
        )
        for t in mandatory_templates(templates, employee.department)
    ]
    seen = {row.kra_id for row in rows}
    lookup = _by_id(templates)
    for assignment in employee.kras:
        template = lookup.get(assignment.kra_id)
        if template is None or template.id in seen:
            continue
        seen.add(template.id)
        rows.append(
            EmployeeKra(
                kra_id=template.id,
                title=template.title,
                description=template.description,
                is_mandatory=template.is_mandatory,
                weightage=template.weightage,
                state=AssignmentState(assignment.status.value),
            )
        )
    return rows
