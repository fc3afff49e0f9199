"""
KRA Routes
Templates, employee selections and manager decisions
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, Response, WebSocket, status
from starlette.websockets import WebSocketState
from typing import List, Optional

from app.api.deps import get_store
from app.api.routes.auth import get_current_employee
from app.core.security import decode_access_token
from app.db.store import Collections, DocumentStore
from app.models.employee import Employee, Role
from app.models.kra import GoalReport, KraAction, KraTemplate, KraTemplateCreate, KraTemplateUpdate
from app.services.kra import KraService

logger = logging.getLogger(__name__)

router = APIRouter()


def visible_department(employee: Employee, department: Optional[str]) -> Optional[str]:
    """Managers may browse any department; employees only see their own"""
    if employee.role < Role.HR:
        return employee.department
    return department


@router.get("/templates", response_model=List[KraTemplate])
async def list_templates(
    department: Optional[str] = None,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await KraService(store).list_templates(visible_department(current_employee, department))


@router.post("/templates", response_model=KraTemplate, status_code=status.HTTP_201_CREATED)
async def create_template(
    data: KraTemplateCreate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """
    Create a KRA template (HR and above).
    Mandatory templates are limited to 100% per department.
    """
    return await KraService(store).create_template(current_employee, data)


@router.put("/templates/{template_id}", response_model=KraTemplate)
async def update_template(
    template_id: str,
    data: KraTemplateUpdate,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await KraService(store).update_template(current_employee, template_id, data)


@router.delete("/templates/{template_id}")
async def delete_template(
    template_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    await KraService(store).delete_template(current_employee, template_id)
    return {"message": "KRA template deleted"}


@router.websocket("/templates/live")
async def live_templates(websocket: WebSocket, token: str, department: Optional[str] = None):
    """Push the template list on connect and after every change"""
    store = get_store(websocket)
    employee_id = decode_access_token(token)
    user = await store.get(Collections.USERS, employee_id) if employee_id else None
    if user is None or user.get("is_blocked"):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    service = KraService(store)
    department = visible_department(Employee.model_validate(user), department)

    async def push():
        async for templates in service.watch_templates(department):
            await websocket.send_json([t.model_dump(mode="json") for t in templates])

    async def drain():
        # Client messages are ignored; reading surfaces the disconnect
        while True:
            await websocket.receive_text()

    pusher = asyncio.create_task(push())
    reader = asyncio.create_task(drain())
    done, pending = await asyncio.wait({pusher, reader}, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    if reader in done:
        reader.exception()
        logger.debug("Template watcher disconnected")
        return
    error = pusher.exception()
    if error is not None:
        logger.error("Template feed for %s stopped: %s", employee_id, error)
    if websocket.client_state == WebSocketState.CONNECTED:
        code = status.WS_1011_INTERNAL_ERROR if error is not None else status.WS_1000_NORMAL_CLOSURE
        await websocket.close(code=code)


@router.get("/me", response_model=GoalReport)
async def my_goals(
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await KraService(store).goal_report(current_employee, current_employee.id)


@router.post("/me/{kra_id}", response_model=GoalReport)
async def request_kra(
    kra_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Request an optional KRA; it stays pending until a manager approves it"""
    return await KraService(store).request(current_employee, kra_id)


@router.delete("/me/{kra_id}", response_model=GoalReport)
async def withdraw_kra(
    kra_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Withdraw a pending request"""
    return await KraService(store).withdraw(current_employee, kra_id)


@router.get("/employees/{employee_id}", response_model=GoalReport)
async def goal_report(
    employee_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    return await KraService(store).goal_report(current_employee, employee_id)


@router.get("/employees/{employee_id}/export")
async def export_goal_report(
    employee_id: str,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Goal report as CSV"""
    report = await KraService(store).goal_report(current_employee, employee_id)
    filename = f"{report.employee_name}_Goals.csv".replace(" ", "_")
    return Response(
        content=KraService.goal_report_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/employees/{employee_id}/{kra_id}/{action}", response_model=GoalReport)
async def decide_kra(
    employee_id: str,
    kra_id: str,
    action: KraAction,
    current_employee: Employee = Depends(get_current_employee),
    store: DocumentStore = Depends(get_store),
):
    """Approve, reject or remove a subordinate's KRA"""
    return await KraService(store).decide(current_employee, employee_id, kra_id, action)
