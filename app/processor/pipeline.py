from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import BaseModel

from app.normalization.models import NormalizationResult
from app.queue.models import JobRequest
from app.records.models import MatchColumn


@dataclass(slots=True)
class PipelineContext:
    request: JobRequest
    job_id: str
    matched_by: MatchColumn | None = None
    storage_path: str | None = None
    document: bytes = b""
    extracted: BaseModel | None = None
    normalization_result: NormalizationResult | None = None
    error_message: str = ""

    @property
    def record_id(self) -> str:
        return self.request.record_id

    @property
    def file_name(self) -> str | None:
        return self.request.file_name


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
