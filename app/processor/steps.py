from app.extraction.extractor import DocumentExtractor
from app.logging.logger import Log
from app.normalization.normalizer import normalize_extracted_fine
from app.processor.exceptions import (
    ExtractionValidationError,
    MissingStoragePathError,
    RecordNotMatchedError,
)
from app.processor.pipeline import PipelineContext, PipelineStep
from app.records.updater import RecordUpdater
from app.storage.base import Downloadable


class MarkProcessingStep(PipelineStep):
    def __init__(self, updater: RecordUpdater) -> None:
        self._updater = updater

    def run(self, context: PipelineContext) -> PipelineContext:
        Log.debug(f"Webhook audit payload for record {context.record_id}: {context.request.webhook}")
        result = self._updater.mark_processing(
            context.record_id,
            context.file_name,
            context.request.webhook,
        )
        Log.info(
            f"Record {context.record_id} marked as processing "
            f"(job={context.job_id} updated={result.updated_count} matched_by={result.matched_by})"
        )
        if result.updated_count == 0:
            raise RecordNotMatchedError("no record matched for processing update")
        context.matched_by = result.matched_by
        return context


class ResolveStoragePathStep(PipelineStep):
    def __init__(self, updater: RecordUpdater) -> None:
        self._updater = updater

    def run(self, context: PipelineContext) -> PipelineContext:
        storage_path = self._updater.get_storage_path(
            context.record_id,
            matched_by=context.matched_by,
            file_name=context.file_name,
        )
        Log.info(f"Storage path for record {context.record_id} resolved: {storage_path}")
        if not storage_path:
            raise MissingStoragePathError("missing storage path for record")
        context.storage_path = storage_path
        return context


class DownloadDocumentStep(PipelineStep):
    def __init__(self, storage: Downloadable, bucket: str) -> None:
        self._storage = storage
        self._bucket = bucket

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.storage_path is None:
            raise ValueError("PipelineContext.storage_path must be set before download")
        context.document = self._storage.download(self._bucket, context.storage_path)
        Log.info(
            f"Downloaded {len(context.document)} bytes for record {context.record_id} "
            f"from {self._bucket}/{context.storage_path}"
        )
        return context


class ExtractStep(PipelineStep):
    def __init__(self, extractor: DocumentExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.document:
            raise ValueError("PipelineContext.document must be set before extraction")
        context.extracted = self._extractor.extract(context.document)
        Log.info(
            f"Extraction completed for record {context.record_id}: "
            f"sections={sorted(type(context.extracted).model_fields)}"
        )
        return context


class NormalizeStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        if context.extracted is None:
            raise ValueError("PipelineContext.extracted must be set before normalization")
        result = normalize_extracted_fine(context.extracted)
        updates = result.updates
        Log.info(
            f"Extraction normalized for record {context.record_id}: "
            f"fine_number={updates.fine_number} fine_amount={updates.fine_amount} "
            f"fine_date={updates.fine_date} location={updates.location} "
            f"violation_type={updates.violation_type}"
        )
        if result.validation_errors:
            Log.error(
                f"Extraction validation failed for record {context.record_id}: "
                f"{result.validation_errors}"
            )
            raise ExtractionValidationError(result.validation_errors)
        context.normalization_result = result
        return context


class MarkProcessedStep(PipelineStep):
    def __init__(self, updater: RecordUpdater) -> None:
        self._updater = updater

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.normalization_result is None:
            raise ValueError("PipelineContext.normalization_result must be set before persist")
        result = self._updater.mark_processed_with_extraction(
            context.record_id,
            context.file_name,
            context.normalization_result.updates.to_fields(),
        )
        Log.info(
            f"Record {context.record_id} marked as processed "
            f"(updated={result.updated_count} matched_by={result.matched_by})"
        )
        if result.updated_count == 0:
            raise RecordNotMatchedError("no record matched for processed update")
        context.matched_by = result.matched_by
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, updater: RecordUpdater) -> None:
        self._updater = updater

    def run(self, context: PipelineContext) -> PipelineContext:
        result = self._updater.mark_failed(
            context.record_id,
            context.error_message,
            context.file_name,
            context.request.webhook,
        )
        Log.error(
            f"Record {context.record_id} marked as error: {context.error_message} "
            f"(updated={result.updated_count} matched_by={result.matched_by})"
        )
        return context
