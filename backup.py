"""
Google Sheets backup of the MongoDB database

Exports every collection and writes claims (one sheet per category), requests
(one sheet per type), any other collections and a summary sheet into a backup
spreadsheet through the Sheets REST API.

Run from cron with the `pharmacy-backup` command.
"""

import json
import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account
from requests import RequestException

import config
import database

logger = logging.getLogger(__name__)

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"
SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]

CLAIM_SHEETS = {
    "medications": "Medications",
    "appeals": "Appeals",
    "manual-claims": "Manual Claims",
    "diapers-pads": "Diapers and Pads",
}
REQUEST_SHEETS = {
    "refill": "Refill Requests",
    "consultation": "Consultation Requests",
}
SUMMARY_SHEET = "Summary"

COLUMN_PRIORITY = [
    "id",
    "category",
    "type",
    "rxNumber",
    "productName",
    "prescriberName",
    "prescriberLicense",
    "prescriberFax",
    "prescriberPhone",
    "dateOfPrescription",
    "claimStatus",
    "status",
    "phone",
    "prescriptions",
    "deliveryType",
    "estimatedTime",
    "service",
    "preferredDateTime",
    "authorizationNumber",
    "caseNumber",
    "din",
    "itemNumber",
    "priority",
    "createdAt",
    "updatedAt",
]

ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


class BackupError(Exception):
    """Raised when the backup cannot be written"""


@dataclass
class CollectionBackup:
    collection: str
    data: List[Dict[str, Any]]
    backup_date: str


@dataclass
class BackupResult:
    success: bool
    spreadsheet_id: Optional[str] = None
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def local_date() -> str:
    """Today's date at the pharmacy; names the backup sheets."""
    return datetime.now(ZoneInfo(config.PHARMACY_TIMEZONE)).date().isoformat()


def export_collections() -> List[CollectionBackup]:
    """Every non-system collection with all of its documents."""
    db = database.db
    if db is None:
        raise BackupError("Database not configured. Set DATABASE_URL.")

    backup_date = datetime.now(timezone.utc).isoformat()
    backups = []
    for name in sorted(db.list_collection_names()):
        if name.startswith("system."):
            continue
        documents = [database.serialize_document(doc) for doc in db[name].find({})]
        backups.append(CollectionBackup(collection=name, data=documents, backup_date=backup_date))
        logger.info(f"Exported {len(documents)} documents from {name}")
    return backups


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def _us_date(value: datetime) -> str:
    return value.strftime("%m/%d/%Y")


def _pairs(value: Dict[str, Any]) -> str:
    return "; ".join(f"{k}: {v}" for k, v in value.items())


def format_value_for_sheet(value: Any) -> str:
    """Render a stored value as a spreadsheet-friendly string."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return _us_date(value)
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list):
        if not value:
            return ""
        if isinstance(value[0], dict):
            return " | ".join(_pairs(item) if isinstance(item, dict) else str(item) for item in value)
        return "; ".join(str(item) for item in value)
    if isinstance(value, dict):
        return _pairs(value)
    if isinstance(value, str) and ISO_DATE_PREFIX.match(value):
        try:
            return _us_date(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return value
    return str(value)


def format_header_name(key: str) -> str:
    """rxNumber -> Rx Number, _id -> Database ID"""
    if key == "_id":
        return "Database ID"
    spaced = re.sub(r"([A-Z])", r" \1", key)
    return (spaced[:1].upper() + spaced[1:]).strip()


def column_order(key: str) -> int:
    try:
        return COLUMN_PRIORITY.index(key) + 1
    except ValueError:
        return 100


def build_sheet_rows(documents: List[Dict[str, Any]], sheet_name: str) -> List[List[str]]:
    """Header row plus one formatted row per document."""
    if not documents:
        return [[f"No data available for {sheet_name}"]]

    keys = set()
    for doc in documents:
        for key in doc:
            # prefer our own id over Mongo's
            if key != "_id" or not doc.get("id"):
                keys.add(key)

    headers = sorted(keys, key=lambda k: (column_order(k), k))
    rows = [[format_header_name(h) for h in headers]]
    for doc in documents:
        rows.append([format_value_for_sheet(doc.get(h)) for h in headers])
    return rows


def build_collection_rows(backup: CollectionBackup) -> List[List[str]]:
    """Raw dump of a collection for the 'Other Collections' sheet."""
    if not backup.data:
        return [[f"Collection: {backup.collection} (Empty)"]]

    headers: List[str] = []
    for doc in backup.data:
        for key in doc:
            if key not in headers:
                headers.append(key)

    def raw(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, (dict, list)):
            return json.dumps(value, default=str)
        return str(value)

    blank = [""] * (len(headers) + 1)
    rows = [[f"Collection: {backup.collection}", *headers], blank]
    rows.extend([backup.collection, *[raw(doc.get(h)) for h in headers]] for doc in backup.data)
    rows.append(blank)
    return rows


def build_summary_rows(backups: List[CollectionBackup], today: str) -> List[List[str]]:
    by_name = {b.collection: b for b in backups}
    rows = [["Backup Summary"], ["Date", today], [""], ["Category/Type", "Record Count", "Backup Time"]]

    claims = by_name.get("claims")
    if claims:
        for category, title in CLAIM_SHEETS.items():
            count = sum(1 for c in claims.data if c.get("category") == category)
            rows.append([title, str(count), claims.backup_date])

    requests_backup = by_name.get("requests")
    if requests_backup:
        for request_type, title in REQUEST_SHEETS.items():
            count = sum(1 for r in requests_backup.data if r.get("type") == request_type)
            rows.append([title, str(count), requests_backup.backup_date])

    for backup in backups:
        if backup.collection not in ("claims", "requests"):
            rows.append([backup.collection, str(len(backup.data)), backup.backup_date])
    return rows


# ---------------------------------------------------------------------------
# Google Sheets
# ---------------------------------------------------------------------------

def _service_account_info() -> Dict[str, Any]:
    if not config.GOOGLE_SERVICE_ACCOUNT_KEY:
        raise BackupError(
            "GOOGLE_SERVICE_ACCOUNT_KEY is not set. Please configure it in your environment variables."
        )
    try:
        return json.loads(config.GOOGLE_SERVICE_ACCOUNT_KEY)
    except ValueError as e:
        raise BackupError(
            "GOOGLE_SERVICE_ACCOUNT_KEY is not valid JSON. Please check your environment variable."
        ) from e


class SheetsClient:
    """Thin wrapper over the Sheets v4 REST endpoints the backup needs."""

    def __init__(self, info: Dict[str, Any]):
        credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        self.session = AuthorizedSession(credentials)
        self.service_account_email = info.get("client_email", "service account")

    def _call(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        response = self.session.request(method, url, timeout=60, **kwargs)
        response.raise_for_status()
        return response.json() if response.content else {}

    def get(self, spreadsheet_id: str, fields: Optional[str] = None) -> Dict[str, Any]:
        params = {"fields": fields} if fields else None
        return self._call("GET", f"{SHEETS_API}/{spreadsheet_id}", params=params)

    def create(self, title: str) -> str:
        body = self._call("POST", SHEETS_API, json={"properties": {"title": title}})
        spreadsheet_id = body.get("spreadsheetId")
        if not spreadsheet_id:
            raise BackupError("Failed to create spreadsheet")
        return spreadsheet_id

    def batch_update(self, spreadsheet_id: str, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._call("POST", f"{SHEETS_API}/{spreadsheet_id}:batchUpdate", json={"requests": requests})

    def update_values(self, spreadsheet_id: str, range_: str, values: List[List[str]]) -> None:
        self._call(
            "PUT",
            f"{SHEETS_API}/{spreadsheet_id}/values/{range_}",
            params={"valueInputOption": "RAW"},
            json={"values": values},
        )

    def append_values(self, spreadsheet_id: str, range_: str, values: List[List[str]]) -> None:
        self._call(
            "POST",
            f"{SHEETS_API}/{spreadsheet_id}/values/{range_}:append",
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": values},
        )

    def sheet_ids(self, spreadsheet_id: str) -> Dict[str, int]:
        body = self.get(spreadsheet_id, fields="sheets.properties")
        return {s["properties"]["title"]: s["properties"]["sheetId"] for s in body.get("sheets", [])}


def get_or_create_spreadsheet(client: SheetsClient, spreadsheet_id: Optional[str]) -> str:
    if spreadsheet_id:
        try:
            client.get(spreadsheet_id, fields="spreadsheetId,properties.title")
            return spreadsheet_id
        except RequestException as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            if status == 403:
                raise BackupError(
                    f"Permission denied. Please share the spreadsheet (ID: {spreadsheet_id}) with the "
                    f"service account: {client.service_account_email}. Go to "
                    f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit and click Share, then add "
                    f"the email with Editor permissions."
                ) from e
            if status != 404:
                logger.warning(f"Could not read spreadsheet metadata, writing anyway: {e}")
                return spreadsheet_id
            logger.warning(f"Spreadsheet {spreadsheet_id} not found, creating a new one")

    new_id = client.create(f"Kateri Pharmacy Backup - {local_date()}")
    logger.info(f"Created backup spreadsheet {new_id}")
    return new_id


def recreate_sheets(client: SheetsClient, spreadsheet_id: str, titles: List[str]) -> Dict[str, int]:
    """Drop and re-add the given sheets. Returns title -> sheetId for the new sheets."""
    existing = client.sheet_ids(spreadsheet_id)
    deletions = [{"deleteSheet": {"sheetId": existing[t]}} for t in titles if t in existing]
    if deletions:
        client.batch_update(spreadsheet_id, deletions)

    reply = client.batch_update(
        spreadsheet_id, [{"addSheet": {"properties": {"title": t}}} for t in titles]
    )
    created = {}
    for item in reply.get("replies", []):
        props = item.get("addSheet", {}).get("properties", {})
        if "title" in props:
            created[props["title"]] = props.get("sheetId")
    return created


def _header_format_requests(sheet_id: int) -> List[Dict[str, Any]]:
    return [
        {
            "repeatCell": {
                "range": {"sheetId": sheet_id, "startRowIndex": 0, "endRowIndex": 1},
                "cell": {
                    "userEnteredFormat": {
                        "textFormat": {"bold": True},
                        "backgroundColor": {"red": 0.9, "green": 0.9, "blue": 0.9},
                    }
                },
                "fields": "userEnteredFormat(textFormat,backgroundColor)",
            }
        },
        {
            "updateSheetProperties": {
                "properties": {"sheetId": sheet_id, "gridProperties": {"frozenRowCount": 1}},
                "fields": "gridProperties.frozenRowCount",
            }
        },
    ]


def upload_to_google_sheets(backups: List[CollectionBackup]) -> str:
    """Write a backup into the configured (or a new) spreadsheet and return its id."""
    client = SheetsClient(_service_account_info())
    spreadsheet_id = get_or_create_spreadsheet(client, config.GOOGLE_BACKUP_SPREADSHEET_ID)
    today = local_date()

    by_name = {b.collection: b for b in backups}
    claims = by_name.get("claims")
    requests_backup = by_name.get("requests")
    others = [b for b in backups if b.collection not in ("claims", "requests")]

    titles = list(CLAIM_SHEETS.values()) + list(REQUEST_SHEETS.values())
    sheet_ids = recreate_sheets(client, spreadsheet_id, titles)

    sheet_data = {}
    if claims and claims.data:
        for category, title in CLAIM_SHEETS.items():
            sheet_data[title] = [c for c in claims.data if c.get("category") == category]
    if requests_backup and requests_backup.data:
        for request_type, title in REQUEST_SHEETS.items():
            sheet_data[title] = [r for r in requests_backup.data if r.get("type") == request_type]

    formatting = []
    for title, documents in sheet_data.items():
        client.update_values(spreadsheet_id, f"{title}!A1", build_sheet_rows(documents, title))
        if documents and sheet_ids.get(title) is not None:
            formatting.extend(_header_format_requests(sheet_ids[title]))
    if formatting:
        try:
            client.batch_update(spreadsheet_id, formatting)
        except RequestException as e:
            # data is already written
            logger.warning(f"Header formatting failed: {e}")

    if others:
        other_title = f"Other Collections_{today}"
        recreate_sheets(client, spreadsheet_id, [other_title])
        for backup in others:
            client.append_values(spreadsheet_id, f"{other_title}!A:Z", build_collection_rows(backup))

    recreate_sheets(client, spreadsheet_id, [SUMMARY_SHEET])
    client.update_values(spreadsheet_id, f"{SUMMARY_SHEET}!A1", build_summary_rows(backups, today))

    return spreadsheet_id


def perform_backup() -> BackupResult:
    try:
        backups = export_collections()
        spreadsheet_id = upload_to_google_sheets(backups)
    except Exception as e:
        logger.exception("❌ Backup failed")
        return BackupResult(success=False, error=str(e) or "Unknown error")

    logger.info(f"✅ Backup completed: {spreadsheet_id}")
    return BackupResult(success=True, spreadsheet_id=spreadsheet_id)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    result = perform_backup()
    if result.success:
        print(f"Backup completed successfully. Spreadsheet ID: {result.spreadsheet_id}")
        return 0
    print(f"Backup failed: {result.error}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
