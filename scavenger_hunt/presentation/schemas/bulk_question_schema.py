from pydantic import BaseModel
from typing import List


class BulkUploadResponse(BaseModel):
    total_rows: int
    inserted: int
    failed: int
    errors: List[str]
