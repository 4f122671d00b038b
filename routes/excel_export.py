import io
import logging
from urllib.parse import quote

from fastapi import APIRouter
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, StrictStr

from utils.database import column_names, execute, iter_rows, open_connection
from utils.workbook import append_header, append_record, new_sheet, save_workbook

logger = logging.getLogger(__name__)

router = APIRouter()


class ExportRequest(BaseModel):
    db_user: StrictStr
    db_password: StrictStr
    db_host: StrictStr
    db_name: StrictStr
    query: StrictStr


def content_disposition(filename: str) -> str:
    # header values go out as latin-1, anything else needs RFC 5987 encoding
    try:
        filename.encode("latin-1")
        plain = filename.isprintable()
    except UnicodeEncodeError:
        plain = False
    if not plain:
        return f"attachment; filename*=utf-8''{quote(filename)}"
    return f"attachment; filename={filename}"


@router.post("/generate-excel")
def generate_excel(payload: ExportRequest):
    # Credentials and query go to the database as-is: callers are trusted.
    with open_connection(payload) as conn, execute(conn, payload.query) as result:
        columns = column_names(result)
        ws = new_sheet()
        append_header(ws, columns)

        row_count = 0
        for values in iter_rows(result, len(columns)):
            append_record(ws, values)
            row_count += 1

    content = save_workbook(ws.parent, payload.db_name)
    filename = f"result_{payload.db_name}.xlsx"
    logger.info(f"Exported {row_count} rows x {len(columns)} columns from {payload.db_name!r}")

    return StreamingResponse(io.BytesIO(content), media_type="application/octet-stream", headers={
        "Content-Description": "File Transfer",
        "Content-Disposition": content_disposition(filename),
    })
