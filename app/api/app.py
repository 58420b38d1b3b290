"""FastAPI application factory for the webhook receiver."""

from collections.abc import Callable

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.exceptions import WebhookError
from app.api.payload import decode_json_body, parse_webhook_payload
from app.api.signature import SIGNATURE_HEADER, verify_signature
from app.config.settings import Settings
from app.logging.logger import Log
from app.queue.models import JobRequest, QueuedJob

EnqueueJob = Callable[[JobRequest], QueuedJob]


def create_app(enqueue_job: EnqueueJob, settings: Settings) -> FastAPI:
    """Build the webhook app around *enqueue_job*.

    The request body is read as raw bytes and verified before any JSON
    parsing happens.
    """
    app = FastAPI(title="Fine Processing Server", docs_url=None, redoc_url=None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/webhook")
    async def webhook(request: Request) -> JSONResponse:
        raw_body = await request.body()
        try:
            verify_signature(
                raw_body, request.headers.get(SIGNATURE_HEADER), settings.webhook_secret
            )
            job_request = parse_webhook_payload(decode_json_body(raw_body))
            job = await run_in_threadpool(enqueue_job, job_request)
        except WebhookError as exc:
            Log.warning(f"Webhook rejected ({exc.status_code}): {exc.message}")
            return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
        except Exception as exc:
            Log.error(f"Webhook enqueue failed: {exc}", exc_info=True)
            return JSONResponse(status_code=500, content={"error": "failed to enqueue job"})

        Log.info(f"Webhook accepted: record {job_request.record_id} queued as job {job.id}")
        return JSONResponse(status_code=202, content={"status": "queued", "jobId": job.id})

    return app
