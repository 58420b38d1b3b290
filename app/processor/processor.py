from app.config.settings import Settings
from app.database.repositories.records_repository import RecordsRepository
from app.extraction.client_base import BaseExtractionClient
from app.extraction.extractor import DocumentExtractor
from app.extraction.factory import ExtractionClientFactory
from app.logging.logger import Log
from app.processor.models import ProcessingResult
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    DownloadDocumentStep,
    ExtractStep,
    MarkFailedStep,
    MarkProcessedStep,
    MarkProcessingStep,
    NormalizeStep,
    ResolveStoragePathStep,
)
from app.queue.models import JobRequest
from app.records.base import RecordStore
from app.records.updater import RecordUpdater
from app.storage.base import Downloadable
from app.storage.factory import StorageFactory


class Processor:
    """Orchestrates the fine processing pipeline for one job.

    Pipeline: mark processing -> resolve storage path -> download -> extract
    -> normalize -> mark processed. Any failure runs the failed step, which
    records the error on the record, and the original exception is re-raised.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, request: JobRequest, job_id: str) -> ProcessingResult:
        """Run every step for *request*, leaving the record processed or errored."""
        Log.info(f"Processing record {request.record_id} for job {job_id}")
        context = PipelineContext(request=request, job_id=job_id)
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc) or type(exc).__name__
            self._mark_failed(context)
            raise

        return ProcessingResult(record_id=request.record_id, matched_by=context.matched_by)

    def _mark_failed(self, context: PipelineContext) -> None:
        try:
            self._failed_step.run(context)
        except Exception as mark_exc:
            Log.error(
                f"Failed to mark record {context.record_id} as errored for job "
                f"{context.job_id}: {mark_exc}",
                exc_info=True,
            )


def build_processor(
    settings: Settings,
    *,
    store: RecordStore | None = None,
    storage: Downloadable | None = None,
    extraction_client: BaseExtractionClient | None = None,
    extractor: DocumentExtractor | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    if not settings.storage_bucket:
        raise ValueError("storage_bucket is required")
    updater = RecordUpdater(store if store is not None else RecordsRepository(settings.records_table))
    storage = storage if storage is not None else StorageFactory.create(settings)
    if extractor is None:
        extractor = ExtractionClientFactory.create_extractor(settings, client=extraction_client)
    steps: list[PipelineStep] = [
        MarkProcessingStep(updater),
        ResolveStoragePathStep(updater),
        DownloadDocumentStep(storage, settings.storage_bucket),
        ExtractStep(extractor),
        NormalizeStep(),
        MarkProcessedStep(updater),
    ]
    return Processor(steps=steps, failed_step=MarkFailedStep(updater))
