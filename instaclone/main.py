from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .routes import router, MISSING_BODY_MESSAGES
from .core import init_metrics, mongo_startup, shutdown_connections, LOG_LEVEL
from .middleware import BodySizeLimitMiddleware
from .dependencies import get_registry, get_sweeper
import logging
from pythonjsonlogger import jsonlogger

# setup structured logging
logger = logging.getLogger('instaclone')
handler = logging.StreamHandler()
formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(LOG_LEVEL)

app = FastAPI(title="Instaclone API", version="1.0.0")

# added before CORS so a 413 still carries the CORS headers
app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_methods=['*'],
    allow_headers=['*'],
)

API_PREFIX = '/api'

app.include_router(router, prefix=API_PREFIX)


@app.get('/api/health')
async def health():
    return {'success': True, 'message': 'Server is running'}


@app.exception_handler(RequestValidationError)
async def validation_failed(request: Request, exc: RequestValidationError):
    # malformed bodies get the same 200 + success:false envelope as every other failure
    errors = exc.errors()
    if any(tuple(err.get('loc', ())) == ('body',) for err in errors):
        # no body at all, or one that is not a JSON object: same answer as missing fields
        message = MISSING_BODY_MESSAGES.get(request.url.path.removeprefix(API_PREFIX))
        if message:
            return JSONResponse({'success': False, 'message': message})
    fields = sorted({str(err['loc'][-1]) for err in errors if err.get('loc')})
    logger.info({'msg': 'invalid_request', 'path': request.url.path, 'fields': fields})
    return JSONResponse({'success': False, 'message': f"Invalid request: {', '.join(fields)}"})


@app.middleware('http')
async def log_requests(request: Request, call_next):
    logger.info({'msg': 'request_start', 'method': request.method, 'path': request.url.path})
    response = await call_next(request)
    logger.info({'msg': 'request_end', 'status': response.status_code})
    return response


@app.on_event("startup")
async def startup():
    # Best-effort init, don't block app from starting if a dependency fails
    try:
        init_metrics()
    except Exception as e:
        logger.warning({'msg': 'metrics_init_failed', 'error': str(e)})
    try:
        await mongo_startup()
        await get_registry().ensure_indexes()
    except Exception as e:
        logger.warning({'msg': 'mongo_init_failed', 'error': str(e)})
    await get_sweeper().start()


@app.on_event("shutdown")
async def shutdown():
    await get_sweeper().stop()
    await shutdown_connections()
