from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class InsightValueDTO(BaseModel):
    type: str
    value: int
    derived: bool = False


class CallInsightDTO(BaseModel):
    function: Optional[str] = None
    callee: Optional[str] = None
    resolved: Optional[str] = None
    line: Optional[int] = None
    duration: InsightValueDTO
    source: Optional[str] = None


class FunctionInsightDTO(BaseModel):
    function: str
    line: Optional[int] = None
    path_count: int
    path_durations: List[Optional[int]] = []
    estimated_duration: Optional[int] = None


class AnalysisReportDTO(BaseModel):
    path: Optional[str] = None
    language: str
    module: str
    functions: List[FunctionInsightDTO] = []
    calls: List[CallInsightDTO] = []
