import logging
import re
import secrets
import string
import time
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from bson import ObjectId
from fastapi import BackgroundTasks, Body, Depends, FastAPI, File, Header, HTTPException, Request, Response, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import TypeAdapter, ValidationError
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import availability
import backup
import captcha
import config
import database
import email_service
import fax
from auth import COOKIE_NAME, check_credentials, create_admin_token, require_admin
from database import create_document, get_collection, get_documents, serialize_document, utcnow
from email_service import EmailError
from schemas import (
    CLAIM_STATUSES,
    REQUEST_STATUSES,
    REQUEST_TYPES,
    SETTINGS_ID,
    ClaimCreate,
    ClaimDeletion,
    DocumentAttach,
    EmailTestRequest,
    FaxRequest,
    LoginRequest,
    NoteCreate,
    OrderCreate,
    RequestCreate,
    RequestStatusUpdate,
    Settings,
    SettingsUpdate,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("pymongo").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

app = FastAPI(title="Kateri Pharmacy API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=config.UPLOAD_DIR), name="uploads")

request_adapter = TypeAdapter(RequestCreate)


# ---- Error envelope ----

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Validation error", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


# ---- Helper functions ----

BASE36 = string.digits + string.ascii_lowercase


def generate_id(prefix: str) -> str:
    # req_1767542400000_k3j9x0a2b
    suffix = "".join(secrets.choice(BASE36) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def iso_now() -> str:
    return utcnow().isoformat()


def local_today():
    return datetime.now(ZoneInfo(config.PHARMACY_TIMEZONE)).date()


def positive_int(value: Optional[str], default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


@contextmanager
def db_operation(error_message: str):
    try:
        yield
    except PyMongoError:
        logger.exception(error_message)
        raise HTTPException(status_code=500, detail=error_message)


def check_captcha(token: Optional[str], request: Request):
    if not config.RECAPTCHA_SECRET_KEY:
        return
    remote_ip = request.client.host if request.client else None
    if not captcha.verify_captcha(token, remote_ip):
        raise HTTPException(status_code=400, detail="CAPTCHA verification failed")


def load_settings() -> Dict[str, Any]:
    stored = get_collection("settings").find_one({"id": SETTINGS_ID}, {"_id": 0})
    return stored or Settings().model_dump(by_alias=True)


# ---- Health ----

@app.get("/")
def read_root():
    return {"message": "Kateri Pharmacy Backend Ready"}


@app.get("/test")
def test_database():
    resp = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "collections": [],
    }
    try:
        if database.db is not None:
            resp["database"] = "✅ Connected"
            resp["collections"] = database.db.list_collection_names()[:10]
    except PyMongoError as e:
        resp["database"] = f"⚠️ {str(e)[:80]}"
    return resp


# ---- Admin auth ----

@app.post("/api/auth/login")
def login(payload: LoginRequest, response: Response):
    if not check_credentials(payload.username, payload.password):
        logger.warning(f"Failed admin login attempt for '{payload.username}'")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_admin_token(payload.username)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.IS_PRODUCTION,
        samesite="strict",
        max_age=config.JWT_EXPIRATION_HOURS * 3600,
        path="/",
    )
    return {"success": True, "message": "Login successful"}


@app.post("/api/auth/logout")
def logout(response: Response):
    response.delete_cookie(key=COOKIE_NAME, path="/")
    return {"success": True, "message": "Logged out"}


@app.get("/api/auth/me")
def current_admin(admin: Dict[str, Any] = Depends(require_admin)):
    return {"success": True, "user": {"username": admin.get("username"), "role": admin.get("role")}}


# ---- Orders (legacy contact form) ----

@app.post("/api/orders", status_code=201)
def create_order(payload: OrderCreate, request: Request, background_tasks: BackgroundTasks):
    if not payload.full_name or not payload.email:
        raise HTTPException(status_code=400, detail="Full name and email are required")
    check_captcha(payload.captcha_token, request)

    with db_operation("Failed to create order"):
        new_id = create_document("orders", payload)
        order = serialize_document(get_collection("orders").find_one({"_id": ObjectId(new_id)}))

    order["id"] = order.pop("_id")
    background_tasks.add_task(email_service.notify_new_order, order)
    logger.info(f"📦 Order {order['id']} created")
    return {"success": True, "data": order, "message": "Order created successfully"}


@app.get("/api/orders", dependencies=[Depends(require_admin)])
def list_orders(page: Optional[str] = None, limit: Optional[str] = None):
    page_number = positive_int(page, 1)
    page_size = positive_int(limit, 10)

    with db_operation("Failed to fetch orders"):
        total = get_collection("orders").count_documents({})
        orders = get_documents(
            "orders", sort=[("createdAt", -1)], skip=(page_number - 1) * page_size, limit=page_size
        )

    for order in orders:
        order["id"] = order.pop("_id")
    return {
        "success": True,
        "data": {
            "orders": orders,
            "pagination": {
                "page": page_number,
                "limit": page_size,
                "total": total,
                "pages": -(-total // page_size),
            },
        },
    }


@app.get("/api/orders/{order_id}", dependencies=[Depends(require_admin)])
def get_order(order_id: str):
    if not re.fullmatch(r"[0-9a-fA-F]{24}", order_id):
        raise HTTPException(status_code=400, detail="Invalid order ID format")
    with db_operation("Failed to fetch order"):
        order = serialize_document(get_collection("orders").find_one({"_id": ObjectId(order_id)}))
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    order["id"] = order.pop("_id")
    return {"success": True, "data": order}


# ---- Refill / consultation requests ----

@app.post("/api/requests")
def create_request(request: Request, background_tasks: BackgroundTasks, body: Dict[str, Any] = Body(...)):
    try:
        payload = request_adapter.validate_python(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))
    check_captcha(payload.captcha_token, request)

    now = utcnow()
    doc = payload.model_dump(by_alias=True)
    doc.update({"id": generate_id("req"), "status": "pending", "createdAt": now, "updatedAt": now})

    with db_operation("Failed to create request"):
        get_collection("requests").insert_one(doc)
        settings = load_settings()
    serialize_document(doc)

    background_tasks.add_task(email_service.notify_new_request, doc)
    if settings.get("sendToFaxByDefault", True) and config.DOCUMO_API_KEY:
        background_tasks.add_task(fax.fax_request_in_background, doc)

    logger.info(f"📝 {doc['type'].capitalize()} request {doc['id']} submitted")
    return {"success": True, "requestId": doc["id"], "message": "Request submitted successfully"}


@app.get("/api/requests", dependencies=[Depends(require_admin)])
def list_requests(status: Optional[str] = None, type: Optional[str] = None, since: Optional[str] = None):
    query: Dict[str, Any] = {}
    if status and status != "all":
        query["status"] = status
    if type and type != "all":
        query["type"] = type
    if since:
        try:
            since_dt = datetime.fromisoformat(since.replace("Z", "+00:00"))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid since timestamp")
        if since_dt.tzinfo is not None:
            # stored timestamps are naive UTC
            since_dt = since_dt.astimezone(timezone.utc).replace(tzinfo=None)
        query["createdAt"] = {"$gt": since_dt}

    with db_operation("Failed to fetch requests"):
        requests = get_documents("requests", query, sort=[("createdAt", -1)])
    return {"success": True, "requests": requests}


@app.get("/api/requests/stats", dependencies=[Depends(require_admin)])
def request_stats():
    with db_operation("Failed to fetch request statistics"):
        collection = get_collection("requests")
        by_status = {s: collection.count_documents({"status": s}) for s in REQUEST_STATUSES}
        by_type = {t: collection.count_documents({"type": t}) for t in REQUEST_TYPES}
        total = collection.count_documents({})
    return {"success": True, "stats": {"total": total, "byStatus": by_status, "byType": by_type}}


@app.put("/api/requests/{request_id}", dependencies=[Depends(require_admin)])
def update_request_status(request_id: str, payload: Optional[RequestStatusUpdate] = None):
    status = payload.status if payload else None
    if not status:
        raise HTTPException(status_code=400, detail="Status is required")
    if status not in REQUEST_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    with db_operation("Failed to update request"):
        result = get_collection("requests").update_one(
            {"id": request_id}, {"$set": {"status": status, "updatedAt": utcnow()}}
        )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Request not found")
    return {"success": True, "message": "Request updated successfully"}


def find_request(request_id: str) -> Dict[str, Any]:
    with db_operation("Failed to fetch request"):
        doc = get_collection("requests").find_one({"id": request_id})
    if not doc:
        raise HTTPException(status_code=404, detail="Request not found")
    return serialize_document(doc)


@app.get("/api/requests/{request_id}/print", dependencies=[Depends(require_admin)])
def print_request(request_id: str):
    doc = find_request(request_id)
    try:
        pdf = fax.generate_fax_pdf(doc)
    except fax.FaxDocumentError as e:
        logger.error(f"❌ Cannot render request {request_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="request-{request_id}.pdf"'},
    )


@app.post("/api/requests/{request_id}/fax", dependencies=[Depends(require_admin)])
def send_request_fax(request_id: str, payload: Optional[FaxRequest] = None):
    doc = find_request(request_id)
    payload = payload or FaxRequest()
    result = fax.fax_request(doc, recipient_fax=payload.recipient_fax, recipient_name=payload.recipient_name)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)
    return {"success": True, "faxId": result.fax_id, "message": result.message}


# ---- NIHB claims ----

def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


@app.post("/api/claims", dependencies=[Depends(require_admin)])
def create_claim(payload: ClaimCreate):
    now = utcnow()
    claim = payload.model_dump(by_alias=True)
    claim["id"] = generate_id("claim")
    claim["dateOfPrescription"] = claim["dateOfPrescription"] or claim["dateOfRefill"]
    claim["statusHistory"] = [
        {
            "fromStatus": "initial",
            "toStatus": claim["claimStatus"],
            "changedAt": now.isoformat(),
            "changedBy": payload.changed_by or "Admin User",
        }
    ]
    claim["createdAt"] = now
    claim["updatedAt"] = now

    with db_operation("Failed to create claim"):
        get_collection("claims").insert_one(claim)
    logger.info(f"🗂️ Claim {claim['id']} created in {claim['category']}")
    return {"success": True, "claim": serialize_document(claim)}


def claim_filters(
    category: Optional[str] = None,
    status: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    prescriber: Optional[str] = None,
    product: Optional[str] = None,
    expiry: Optional[str] = None,
    priority: Optional[str] = None,
) -> Dict[str, Any]:
    """Mongo query for the dashboard's claim filters."""
    query: Dict[str, Any] = {}
    if category:
        query["category"] = category
    if status and status != "all":
        query["claimStatus"] = status
    if type and type != "all":
        query["type"] = type
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"rxNumber": pattern}, {"productName": pattern}, {"prescriberName": pattern}]
    if prescriber:
        query["prescriberName"] = {"$regex": re.escape(prescriber), "$options": "i"}
    if product:
        query["productName"] = {"$regex": re.escape(product), "$options": "i"}
    if priority in ("true", "false"):
        query["priority"] = priority == "true"
    if expiry and expiry != "all":
        days = {"today": 1, "week": 7, "month": 30, "year": 365}.get(expiry)
        if days is None:
            raise HTTPException(status_code=400, detail="Invalid expiry filter")
        today = local_today()
        # YYYY-MM-DD strings sort chronologically; "" falls below today
        query["authorizationEndDate"] = {
            "$gte": today.isoformat(),
            "$lt": (today + timedelta(days=days)).isoformat(),
        }
    return query


@app.get("/api/claims", dependencies=[Depends(require_admin)])
def list_claims(id: Optional[str] = None, query: Dict[str, Any] = Depends(claim_filters)):
    if id:
        with db_operation("Failed to fetch claims"):
            claim = get_collection("claims").find_one({"id": id})
        if not claim:
            raise HTTPException(status_code=404, detail="Claim not found")
        return {"success": True, "claim": serialize_document(claim)}

    # manual claims are tracked on paper for now
    if query.get("category") == "manual-claims":
        return {"success": True, "claims": []}

    with db_operation("Failed to fetch claims"):
        claims = get_documents("claims", query, sort=[("createdAt", -1)])
    return {"success": True, "claims": claims}


@app.get("/api/claims/summary", dependencies=[Depends(require_admin)])
def claims_summary(category: Optional[str] = None):
    query = {"category": category} if category else {}
    today = local_today()
    today_iso = today.isoformat()
    soon_iso = (today + timedelta(days=30)).isoformat()

    with db_operation("Failed to fetch claims summary"):
        claims = get_documents("claims", query)

    by_status = {s: 0 for s in CLAIM_STATUSES}
    expired = expiring_soon = 0
    for claim in claims:
        status = claim.get("claimStatus")
        if status in by_status:
            by_status[status] += 1
        end = claim.get("authorizationEndDate") or ""
        if not end:
            continue
        if end < today_iso:
            expired += 1
        elif end <= soon_iso:
            expiring_soon += 1

    return {
        "success": True,
        "summary": {
            "total": len(claims),
            "byStatus": by_status,
            "expired": expired,
            "expiringSoon": expiring_soon,
        },
    }


@app.put("/api/claims", dependencies=[Depends(require_admin)])
def update_claim(id: Optional[str] = None, body: Dict[str, Any] = Body(default_factory=dict)):
    updates = dict(body)
    claim_id = updates.pop("id", None) or id
    # an empty status means the status is not being changed
    claim_status = updates.pop("claimStatus", None) or None
    changed_by = updates.pop("changedBy", None) or "Admin User"
    for key in ("_id", "createdAt"):
        updates.pop(key, None)

    if not claim_id:
        raise HTTPException(status_code=400, detail="Claim ID is required")
    if any(not key or key.startswith("$") for key in updates):
        raise HTTPException(status_code=400, detail="Invalid field name")
    if claim_status is not None and claim_status not in CLAIM_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid claim status")

    now = utcnow()
    updates["updatedAt"] = now

    with db_operation("Failed to update claim"):
        collection = get_collection("claims")
        existing = collection.find_one({"id": claim_id})
        if not existing:
            raise HTTPException(status_code=404, detail="Claim not found")

        old_status = existing.get("claimStatus")
        if claim_status is not None:
            updates["claimStatus"] = claim_status
        if claim_status is not None and claim_status != old_status:
            history = list(existing.get("statusHistory") or [])
            if not history:
                history.append(
                    {
                        "fromStatus": "initial",
                        "toStatus": old_status,
                        "changedAt": _iso(existing.get("createdAt")) or now.isoformat(),
                        "changedBy": "Admin User",
                    }
                )
            history.append(
                {
                    "fromStatus": old_status,
                    "toStatus": claim_status,
                    "changedAt": now.isoformat(),
                    "changedBy": changed_by,
                }
            )
            updates["statusHistory"] = history

        collection.update_one({"id": claim_id}, {"$set": updates})

    return {"success": True, "message": "Claim updated successfully"}


@app.delete("/api/claims", dependencies=[Depends(require_admin)])
def delete_claim(id: Optional[str] = None, payload: Optional[ClaimDeletion] = None):
    if not id:
        raise HTTPException(status_code=400, detail="Claim ID is required")
    payload = payload or ClaimDeletion()

    with db_operation("Failed to delete claim"):
        claim = get_collection("claims").find_one({"id": id})
        if not claim:
            raise HTTPException(status_code=404, detail="Claim not found")

        archived = dict(claim)
        archived.update(
            {
                "archivedAt": utcnow(),
                "deletionNote": payload.deletion_note or "",
                "archivedBy": payload.deleted_by or "Admin User",
            }
        )
        get_collection("archived_claims").insert_one(archived)
        result = get_collection("claims").delete_one({"id": id})

    if result.deleted_count == 0:
        raise HTTPException(status_code=500, detail="Failed to delete claim")
    logger.info(f"🗄️ Claim {id} archived by {archived['archivedBy']}")
    return {"success": True, "message": "Claim archived successfully"}


@app.get("/api/claims/archived", dependencies=[Depends(require_admin)])
def list_archived_claims():
    with db_operation("Failed to fetch archived claims"):
        claims = get_documents("archived_claims", sort=[("archivedAt", -1)])
    return {"success": True, "claims": claims}


@app.post("/api/claims/notes", dependencies=[Depends(require_admin)])
def add_note(payload: NoteCreate):
    if not payload.claim_id or not payload.text or not payload.staff_username:
        raise HTTPException(status_code=400, detail="Missing required fields")

    note = {
        "id": generate_id("note"),
        "text": payload.text,
        "staffUsername": payload.staff_username,
        "timestamp": iso_now(),
    }
    with db_operation("Failed to add note"):
        result = get_collection("claims").update_one(
            {"id": payload.claim_id}, {"$push": {"notes": note}, "$set": {"updatedAt": utcnow()}}
        )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Claim not found")
    return {"success": True, "note": note}


@app.delete("/api/claims/notes", dependencies=[Depends(require_admin)])
def delete_note(claimId: Optional[str] = None, noteId: Optional[str] = None):
    if not claimId or not noteId:
        raise HTTPException(status_code=400, detail="Missing required parameters")
    with db_operation("Failed to delete note"):
        result = get_collection("claims").update_one(
            {"id": claimId}, {"$pull": {"notes": {"id": noteId}}, "$set": {"updatedAt": utcnow()}}
        )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Claim not found")
    return {"success": True, "message": "Note deleted successfully"}


@app.post("/api/claims/documents", dependencies=[Depends(require_admin)])
def attach_document(payload: DocumentAttach):
    document = {
        "filename": payload.filename,
        "filePath": payload.file_path,
        "uploadDate": iso_now(),
        "type": payload.type,
    }
    with db_operation("Failed to attach document"):
        result = get_collection("claims").update_one(
            {"id": payload.claim_id}, {"$push": {"documents": document}, "$set": {"updatedAt": utcnow()}}
        )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Claim not found")
    return {"success": True, "document": document}


@app.delete("/api/claims/documents", dependencies=[Depends(require_admin)])
def remove_document(claimId: Optional[str] = None, filePath: Optional[str] = None):
    if not claimId or not filePath:
        raise HTTPException(status_code=400, detail="Missing required parameters")
    with db_operation("Failed to remove document"):
        result = get_collection("claims").update_one(
            {"id": claimId}, {"$pull": {"documents": {"filePath": filePath}}, "$set": {"updatedAt": utcnow()}}
        )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Claim not found")
    return {"success": True, "message": "Document removed successfully"}


# ---- Uploads ----

@app.post("/api/uploads", dependencies=[Depends(require_admin)])
def upload_file(file: Optional[UploadFile] = File(default=None)):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    safe_name = re.sub(r"[^a-zA-Z0-9_.-]", "_", file.filename)
    stored_name = f"{int(time.time() * 1000)}_{safe_name}"
    upload_dir = config.UPLOAD_DIR
    upload_dir.mkdir(parents=True, exist_ok=True)
    try:
        (upload_dir / stored_name).write_bytes(file.file.read())
    except OSError:
        logger.exception("Upload failed")
        raise HTTPException(status_code=500, detail="Upload failed")

    return {
        "success": True,
        "file": {
            "filename": file.filename,
            "filePath": f"/uploads/{stored_name}",
            "uploadDate": iso_now(),
        },
    }


# ---- Dashboard settings ----

@app.get("/api/settings", dependencies=[Depends(require_admin)])
def get_settings():
    with db_operation("Failed to fetch settings"):
        settings = load_settings()
    return {"success": True, "settings": settings}


@app.post("/api/settings", dependencies=[Depends(require_admin)])
def save_settings(payload: SettingsUpdate):
    settings = Settings(**payload.model_dump(exclude_none=True)).model_dump(by_alias=True)
    settings["updatedAt"] = utcnow()
    with db_operation("Failed to save settings"):
        get_collection("settings").update_one({"id": SETTINGS_ID}, {"$set": settings}, upsert=True)
    return {"success": True, "settings": settings}


# ---- Availability (consultation booking) ----

@app.get("/api/availability/times")
def available_times():
    now = datetime.now(ZoneInfo(config.PHARMACY_TIMEZONE))
    return {"success": True, "times": availability.get_available_times(now)}


@app.get("/api/availability/dates")
def available_dates():
    return {"success": True, "dates": availability.get_available_dates(local_today())}


# ---- Email / backup maintenance ----

@app.post("/api/test-email", dependencies=[Depends(require_admin)])
def test_email(payload: Optional[EmailTestRequest] = None):
    recipient = payload.to if payload else None
    try:
        result = email_service.send_configuration_check(recipient)
    except EmailError as e:
        logger.error(f"❌ Test email failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "message": "Test email sent successfully", "messageId": result.get("messageId")}


@app.post("/api/backup")
def run_backup(x_api_key: Optional[str] = Header(default=None)):
    if config.BACKUP_API_KEY and x_api_key != config.BACKUP_API_KEY:
        raise HTTPException(status_code=401, detail="Unauthorized")

    result = backup.perform_backup()
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return {
        "success": True,
        "message": "Backup completed successfully",
        "spreadsheetId": result.spreadsheet_id,
        "spreadsheetUrl": f"https://docs.google.com/spreadsheets/d/{result.spreadsheet_id}",
    }


@app.get("/api/backup")
def backup_info():
    return {"message": "Backup endpoint is available. Use POST to trigger a backup."}


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
