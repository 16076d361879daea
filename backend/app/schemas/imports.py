from datetime import datetime

from pydantic import BaseModel


class ImportProgress(BaseModel):
    current: int
    total: int


class ImportFailure(BaseModel):
    row: int  # 1-based, data rows only
    error: str


class ImportCollectionResult(BaseModel):
    success: int = 0
    failed: list[ImportFailure] = []


class ImportStatus(BaseModel):
    import_id: str
    status: str  # processing, completed, failed
    current: int = 0
    total: int = 0
    started_at: datetime
    completed_at: datetime | None = None
    result: ImportCollectionResult | None = None
    error: str | None = None
