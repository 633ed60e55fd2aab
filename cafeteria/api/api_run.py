from fastapi import (
    FastAPI,
    Query,
    APIRouter,
    HTTPException,
    Response,
    Body
)
from fastapi.responses import JSONResponse
from datetime import datetime
from typing import Optional
import logging

from pydantic import ValidationError

from cafeteria.domain.ReceivingEvent import QualityCheck
from cafeteria.domain.errors import (
    ItemNotFoundError,
    MissingConversionError,
    PlanNotConfirmableError,
    ReceivingEventNotFoundError
)
from cafeteria.events.Event_Bus import GLOBAL_EVENT_BUS
from cafeteria.events.web_observers import start as start_event_observers, get_events as get_web_events
from cafeteria.infra.Document_Store import JsonFileStore
from cafeteria.infra.Ledger_Repository import LedgerStore
from cafeteria.infra.paths import DATA_DIR
from cafeteria.logic.inventory.analysis import (
    compute_expiration_report,
    compute_low_stock,
    filter_consumption,
    filter_receiving,
    list_suppliers,
    recent_consumption_series,
    supplier_report
)
from cafeteria.logic.planning.engine import PlannedUtensil, PlanningEngine
from cafeteria.logic.receiving.intake import create_item_definition, submit_receiving, validation_message
from cafeteria.logic.reference.tables import AVAILABLE_MENUS, DEFAULT_UTENSILS
from cafeteria.logic.reporting.balance import reconstruct_balance
from cafeteria.utilities.config import APP_VERSION
from cafeteria.utilities.constants import DEFAULT_MEAL_TYPE
from cafeteria.utilities.validators import (
    CategoryInput,
    ItemUpdateInput,
    PlanRequest,
    ReceivingHeaderUpdate,
    ReceivingLineUpdate
)

# Routers
from cafeteria.api.api_ai import router as ai_router

# Logging
logger = logging.getLogger("cafeteria_app")

_ledger: Optional[LedgerStore] = None


def get_ledger() -> LedgerStore:
    """Process-wide ledger backed by JSON documents under DATA_DIR (created on first use)."""
    global _ledger
    if _ledger is None:
        _ledger = LedgerStore(JsonFileStore(DATA_DIR), event_bus=GLOBAL_EVENT_BUS)
    return _ledger


def set_ledger(ledger: Optional[LedgerStore]) -> None:
    """Swap the ledger used by the endpoints (tests use an in-memory store)."""
    global _ledger
    _ledger = ledger


def get_engine() -> PlanningEngine:
    return PlanningEngine(get_ledger())


# Initialize FastAPI app
app = FastAPI(title="School Cafeteria Inventory API", version=APP_VERSION)
router = APIRouter()


@app.on_event("startup")
def _startup_web_observers():
    """Register event bus subscribers for web alerts when the app starts."""
    start_event_observers()


def _bad_request(e: ValidationError):
    raise HTTPException(status_code=400, detail=validation_message(e))


# -------------------- API: Inventory --------------------
@router.get('/api/inventory')
def api_inventory(search: Optional[str] = Query(default=None), category: Optional[str] = Query(default=None)):
    needle = (search or '').strip().lower()
    items = []
    for item in get_ledger().get_inventory():
        if needle and needle not in item.name.lower():
            continue
        if category and item.category != category:
            continue
        data = item.to_dict()
        data['lowStock'] = item.is_low_stock
        items.append(data)
    return {"items": items, "count": len(items)}


@router.get('/api/inventory/{item_id}')
def api_item(item_id: str):
    try:
        return get_ledger().get_item(item_id).to_dict()
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post('/api/inventory')
def api_create_item(data: dict = Body(...)):
    result = create_item_definition(get_ledger(), data)
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.message)
    return {"success": True, "item": result.item.to_dict()}


@router.put('/api/inventory/{item_id}')
def api_update_item(item_id: str, data: dict = Body(...)):
    """Edit an item definition. Stock is only changed through receiving and consumption."""
    try:
        changes = ItemUpdateInput.model_validate(data)
    except ValidationError as e:
        _bad_request(e)
    ledger = get_ledger()
    if changes.name:
        other = ledger.find_item_by_name(changes.name)
        if other is not None and other.id != item_id:
            raise HTTPException(status_code=400, detail='Another item with this name already exists')
    try:
        ledger.update_item_definition(item_id, **changes.model_dump(exclude_none=True))
        return {"success": True, "item": ledger.get_item(item_id).to_dict()}
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# -------------------- API: Categories --------------------
@router.get('/api/categories')
def api_categories():
    return {"categories": get_ledger().get_categories()}


@router.post('/api/categories')
def api_add_category(data: dict = Body(...)):
    try:
        payload = CategoryInput.model_validate(data)
    except ValidationError as e:
        _bad_request(e)
    return {"categories": get_ledger().add_category(payload.name)}


@router.put('/api/categories/{name}')
def api_rename_category(name: str, data: dict = Body(...)):
    try:
        payload = CategoryInput.model_validate(data)
    except ValidationError as e:
        _bad_request(e)
    return {"categories": get_ledger().rename_category(name, payload.name)}


@router.delete('/api/categories/{name}')
def api_remove_category(name: str):
    return {"categories": get_ledger().remove_category(name)}


# -------------------- API: Receiving --------------------
@router.get('/api/receiving')
def api_receiving(start: Optional[str] = Query(default=None), end: Optional[str] = Query(default=None),
                  search: Optional[str] = Query(default=None)):
    events = filter_receiving(get_ledger().get_receiving_history(), start, end, search)
    return {"events": [e.to_dict() for e in events], "count": len(events)}


@router.post('/api/receiving')
def api_submit_receiving(data: dict = Body(...)):
    result = submit_receiving(get_ledger(), data)
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.message)
    return {"success": True, "message": result.message, "event": result.event.to_dict()}


@router.put('/api/receiving/{event_id}')
def api_amend_receiving_header(event_id: str, data: dict = Body(...)):
    try:
        changes = ReceivingHeaderUpdate.model_validate(data)
    except ValidationError as e:
        _bad_request(e)
    qc = None
    if changes.qc_check is not None:
        qc = QualityCheck(
            packaging_ok=changes.qc_check.packaging_ok,
            temperature_ok=changes.qc_check.temperature_ok,
            notes=changes.qc_check.notes or None,
        )
    try:
        event = get_ledger().amend_receiving_header(
            event_id, date=changes.date, supplier=changes.supplier,
            invoice_number=changes.invoice_number, qc_check=qc,
        )
    except ReceivingEventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "event": event.to_dict()}


@router.put('/api/receiving/{event_id}/lines/{line_index}')
def api_amend_receiving_line(event_id: str, line_index: int, data: dict = Body(...)):
    try:
        change = ReceivingLineUpdate.model_validate(data)
    except ValidationError as e:
        _bad_request(e)
    ledger = get_ledger()
    try:
        delta = ledger.amend_receiving_line(event_id, line_index, change.quantity, change.expiration_date)
    except ReceivingEventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "delta": delta, "event": ledger.get_receiving_event(event_id).to_dict()}


# -------------------- API: Planning --------------------
@router.get('/api/menus')
def api_menus():
    return {
        "menus": [{"id": m.id, "name": m.name, "ingredients": list(m.ingredients)} for m in AVAILABLE_MENUS],
        "utensils": list(DEFAULT_UTENSILS),
    }


def _build_plan(data: dict):
    try:
        request = PlanRequest.model_validate(data)
    except ValidationError as e:
        _bad_request(e)
    engine = get_engine()
    try:
        selection = engine.select_items(request.item_ids)
        menu_name = None
        if request.menu:
            selection = engine.apply_menu(selection, request.menu)
            menu_name = engine.tables.find_menu(request.menu).name
        utensils = [PlannedUtensil(**u) for u in data.get('utensils') or []]
        return engine, engine.compute_plan(request.segment, request.student_count, selection,
                                           menu_name=menu_name, utensils=utensils)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MissingConversionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except TypeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid utensil: {e}")


@router.post('/api/plan')
def api_compute_plan(data: dict = Body(...)):
    _, plan = _build_plan(data)
    return plan.to_dict()


@router.post('/api/plan/confirm')
def api_confirm_plan(data: dict = Body(...)):
    """Recompute the plan against current stock and record it as a served meal."""
    engine, plan = _build_plan(data)
    try:
        event = engine.confirm(plan, meal_type=data.get('meal_type') or DEFAULT_MEAL_TYPE)
    except PlanNotConfirmableError as e:
        return JSONResponse(status_code=409, content={
            "error": str(e),
            "lacking": [line.to_dict() for line in e.lacking],
        })
    return {"success": True, "event": event.to_dict(), "plan": plan.to_dict()}


# -------------------- API: Reports --------------------
@router.get('/api/reports/balance')
def api_balance(start: Optional[str] = Query(default=None), end: Optional[str] = Query(default=None),
                search: Optional[str] = Query(default=None)):
    ledger = get_ledger()
    rows = reconstruct_balance(ledger.get_inventory(), ledger.get_receiving_history(),
                               ledger.get_consumption_history(), start, end, search)
    return {"rows": [r.to_dict() for r in rows]}


@router.get('/api/reports/expiration')
def api_expiration():
    rows = compute_expiration_report(get_ledger().get_receiving_history(), now=datetime.now())
    return {"rows": [r.to_dict() for r in rows]}


@router.get('/api/reports/low-stock')
def api_low_stock():
    items = compute_low_stock(get_ledger().get_inventory())
    return {"items": items, "count": len(items)}


@router.get('/api/reports/consumption')
def api_consumption(start: Optional[str] = Query(default=None), end: Optional[str] = Query(default=None),
                    segment: Optional[str] = Query(default=None), search: Optional[str] = Query(default=None)):
    try:
        events = filter_consumption(get_ledger().get_consumption_history(), start, end, segment, search)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"events": [e.to_dict() for e in events], "count": len(events)}


@router.get('/api/reports/consumption/recent')
def api_recent_consumption(limit: int = Query(default=7, ge=1, le=100)):
    return {"series": recent_consumption_series(get_ledger().get_consumption_history(), limit)}


@router.get('/api/reports/suppliers')
def api_suppliers(start: Optional[str] = Query(default=None), end: Optional[str] = Query(default=None),
                  supplier: Optional[str] = Query(default=None)):
    log = get_ledger().get_receiving_history()
    return {"suppliers": list_suppliers(log), "rows": supplier_report(log, start, end, supplier)}


# -------------------- API: Alerts (polled by frontend) --------------------
@router.get('/api/alerts')
def api_alerts(
    since: Optional[int] = Query(default=None, description="Return events with id greater than this value")
):
    """
    Return recent inventory alert events (low stock, clamped stock).

    Client polling strategy:
        1. First call without 'since' to load the current backlog.
        2. Store 'next_cursor' from response.
        3. Subsequent polls: /api/alerts?since=<next_cursor>
    """
    return get_web_events(since)


# -------------------- API: Backup --------------------
@router.get('/api/export')
def api_export():
    filename = f"cafeteria-backup-{datetime.now().strftime('%Y-%m-%d')}.json"
    return Response(
        content=get_ledger().export_json(),
        media_type='application/json',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@router.post('/api/import')
def api_import(data: dict = Body(...)):
    if not get_ledger().import_all(data):
        raise HTTPException(status_code=400, detail='Invalid backup file')
    return {"success": True}


@router.post('/api/reset')
def api_reset(confirm: bool = Body(False, embed=True)):
    if not confirm:
        raise HTTPException(status_code=400, detail="Reset requires confirm=true")
    get_ledger().reset_to_seed()
    return {"success": True}


# Register routers
app.include_router(router)
app.include_router(ai_router)


