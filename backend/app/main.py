import logging
from contextlib import asynccontextmanager
from pathlib import Path

from stealth_requests import AsyncStealthSession

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from page_zipper import (
    InvalidURLError,
    PageScraper,
    RequestContext,
    ScrapeError,
    ScraperConfig,
    new_request_id,
    request_workspace,
    validate_target_url,
)

from .config import Settings, configure_logging
from .schemas import ErrorMessage, ScrapeRequest


logger = logging.getLogger('page_zipper.app')

settings = Settings()
scraper_config = settings.scraper_config()

STATIC_DIR = Path(__file__).parent / 'static'


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    scraper_config.workspace_root.mkdir(parents=True, exist_ok=True)
    logger.info('Workspace root: %s', scraper_config.workspace_root)
    yield


app = FastAPI(title='Page Zipper API', lifespan=lifespan)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render errors as {"message": ...} for the front end."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorMessage(message=str(exc.detail)).model_dump(),
        headers=getattr(exc, 'headers', None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=ErrorMessage(message='Invalid request body').model_dump())


async def get_session():
    """One stealth session per request; closed when the response is done."""
    async with AsyncStealthSession() as session:
        yield session


def get_scraper_config() -> ScraperConfig:
    return scraper_config


# API Endpoints
@app.post(
    '/scrape',
    response_class=Response,
    responses={
        200: {'content': {'application/zip': {}}},
        400: {'model': ErrorMessage},
        500: {'model': ErrorMessage},
    },
)
async def scrape(
    request: ScrapeRequest,
    session: AsyncStealthSession = Depends(get_session),
    config: ScraperConfig = Depends(get_scraper_config),
):
    """Scrape a page and its images and return them as a zip file."""
    try:
        url = validate_target_url(request.url)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e))

    context = RequestContext(request_id=new_request_id())
    scraper = PageScraper(session, url, context, config)

    try:
        with request_workspace(config.workspace_root, context) as workspace:
            artifact = await scraper.run(workspace)
    except ScrapeError as e:
        context.log.error('Error processing request: %s', e)
        raise HTTPException(status_code=500, detail=f'Failed to process URL: {e}')
    except Exception as e:
        context.log.exception('Unexpected error processing request')
        raise HTTPException(status_code=500, detail=f'Failed to process URL: {e}')

    context.log.info('Sending ZIP file to client (%d bytes)', len(artifact.content))
    return Response(
        content=artifact.content,
        media_type='application/zip',
        headers={'Content-Disposition': f'attachment; filename="{artifact.filename}"'},
    )


# Front end
@app.get('/', include_in_schema=False)
async def index():
    return FileResponse(STATIC_DIR / 'index.html', media_type='text/html')


@app.get('/script.js', include_in_schema=False)
async def script():
    return FileResponse(STATIC_DIR / 'script.js', media_type='application/javascript')


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
