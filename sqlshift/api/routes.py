from fastapi import APIRouter, Body
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import Dict, Any

from sqlshift.services.sql_conversion import (
    BufferedPipeline,
    ConversionError,
    ConversionOrchestrator,
    InputNotFound,
    EmptyInput,
)
from sqlshift.services.db.db_service import DBService
from sqlshift.services.db.session import open_session
from sqlshift.utils.logger import setup_logger
from sqlshift.utils.timing import timed

api_router = APIRouter(prefix='/api/v1')

# Stateless services; DB connections are opened per request
db_service = DBService()
buffered_pipeline = BufferedPipeline()

# Setup logger for API
logger = setup_logger('api_routes')


def _error_status(exc: ConversionError) -> int:
    if isinstance(exc, InputNotFound):
        return 404
    if isinstance(exc, EmptyInput):
        return 422
    return 500


def _sql_from(payload: Dict[str, Any]):
    sql = (payload or {}).get('sql')
    if not isinstance(sql, str) or not sql.strip():
        return None
    return sql


@api_router.get('/')
def root():
    """Root endpoint of the API.

    Returns a simple JSON message indicating the API is running.
    {
        "message": "API is running"
    }
    """
    return JSONResponse({"message": "API is running"})

# ----------------------- In-memory conversion -----------------------

@api_router.post('/sql/convert')
def convert_sql_endpoint(payload: Dict[str, Any] = Body(...)):
    """Convert SQL text posted as ``{"sql": "..."}``."""
    sql = _sql_from(payload)
    if sql is None:
        return JSONResponse({'error': 'Missing required field: sql'}, status_code=400)

    outcome = buffered_pipeline.convert(sql)
    return JSONResponse({
        'status': 'success',
        'header': outcome.header,
        'converted_sql': outcome.text,
    })


@api_router.post('/sql/preview')
def preview_sql_endpoint(payload: Dict[str, Any] = Body(...)):
    sql = _sql_from(payload)
    if sql is None:
        return JSONResponse({'error': 'Missing required field: sql'}, status_code=400)

    preview, truncated = buffered_pipeline.preview(sql)
    return JSONResponse({'preview': preview, 'truncated': truncated})


@api_router.post('/sql/stats')
def stats_sql_endpoint(payload: Dict[str, Any] = Body(...)):
    sql = _sql_from(payload)
    if sql is None:
        return JSONResponse({'error': 'Missing required field: sql'}, status_code=400)

    outcome = buffered_pipeline.convert(sql)
    return JSONResponse(buffered_pipeline.stats(sql, outcome.text).to_dict())

# ----------------------- File system conversion -----------------------

@api_router.post('/sql/convert_file')
def convert_file_endpoint(payload: Dict[str, Any] = Body(...)):
    input_path = payload.get('input_path')
    if not input_path:
        return JSONResponse({'error': 'Missing required field: input_path'}, status_code=400)

    orchestrator = ConversionOrchestrator()
    try:
        outcome = orchestrator.convert_file(
            input_path,
            payload.get('output_path'),
            stats=bool(payload.get('stats', False)),
            preview=bool(payload.get('preview', False)),
        )
    except ConversionError as e:
        logger.error(f"/sql/convert_file failed for {input_path}: {e}")
        return JSONResponse({'error': str(e)}, status_code=_error_status(e))

    status_code = 200 if outcome.success else 400
    return JSONResponse(outcome.to_dict(), status_code=status_code)


@api_router.post('/sql/batch')
def batch_convert_endpoint(payload: Dict[str, Any] = Body(...)):
    directory = payload.get('directory')
    if not directory:
        return JSONResponse({'error': 'Missing required field: directory'}, status_code=400)

    orchestrator = ConversionOrchestrator()

    def _run() -> Dict[str, Any]:
        report = orchestrator.run_batch(directory, payload.get('output_dir'), payload.get('pattern'))
        return {
            'status': 'success' if not report.failure_count else 'partial_success',
            'success_count': report.success_count,
            'failure_count': report.failure_count,
            'files': [o.to_dict() for o in report.outcomes.values()],
        }

    try:
        result = timed(_run, label="sql/batch")
    except ConversionError as e:
        return JSONResponse({'error': str(e)}, status_code=_error_status(e))
    return JSONResponse(result)

# ----------------------- Database -----------------------

@api_router.post('/db/test-connection')
def test_connection(data: Dict[str, Any] = Body(default={})):
    try:
        with open_session((data or {}).get('connection')) as session:
            ok = db_service.test_connection(session)
        if ok:
            return JSONResponse({'status': 'success', 'message': 'Successfully connected to MySQL'})
        return JSONResponse({'status': 'error', 'message': 'Connection test failed'}, status_code=400)
    except Exception as e:
        return JSONResponse({'status': 'error', 'message': f'Connection failed: {e}'}, status_code=400)


@api_router.post('/db/execute')
def execute_sql(data: Dict[str, Any] = Body(...)):
    """Execute converted SQL, either inline (``sql``) or from a file (``file``)."""
    sql = _sql_from(data)
    file_path = data.get('file')
    if sql is None and not file_path:
        return JSONResponse({'error': 'Provide either "sql" or "file"'}, status_code=400)

    try:
        with open_session(data.get('connection')) as session:
            if file_path:
                result = timed(lambda: db_service.execute_sql_file(session, file_path).to_dict(), label="db/execute")
            else:
                result = timed(lambda: db_service.execute_script(session, sql).to_dict(), label="db/execute")
    except ConversionError as e:
        return JSONResponse({'error': str(e)}, status_code=_error_status(e))
    except Exception as e:
        logger.error(f"/db/execute failed: {e}", exc_info=True)
        return JSONResponse({'status': 'error', 'message': str(e)}, status_code=500)

    return JSONResponse(result)


@api_router.post('/db/query')
def query_db(data: Dict[str, Any] = Body(...)):
    sql = _sql_from(data)
    if sql is None:
        return JSONResponse({'error': 'Missing required field: sql'}, status_code=400)

    try:
        limit = int(data.get('limit', 10))
        with open_session(data.get('connection')) as session:
            rows = db_service.query(session, DBService.with_default_limit(sql, limit))
    except ValueError as ve:
        return JSONResponse({'error': str(ve)}, status_code=400)
    except Exception as e:
        logger.error(f"/db/query failed: {e}", exc_info=True)
        return JSONResponse({'status': 'error', 'message': str(e)}, status_code=500)

    return JSONResponse(jsonable_encoder({'rows': rows, 'count': len(rows)}))


@api_router.get('/db/info')
def db_info():
    try:
        with open_session() as session:
            info = db_service.database_info(session)
            info['tables'] = db_service.list_tables(session)
    except Exception as e:
        logger.error(f"/db/info failed: {e}", exc_info=True)
        return JSONResponse({'status': 'error', 'message': str(e)}, status_code=500)
    return JSONResponse(jsonable_encoder(info))
