from __future__ import annotations

from sightline.artifact.model import CallArtifact, FunctionArtifact
from sightline.ingest.adapter_contract import ParsedModule
from sightline.insight.keys import InsightKeys, InsightValue
from sightline.insight.passes.call_duration import average_path_duration
from sightline.insight.path import get_multi_path
from sightline.schema import (
    AnalysisReportDTO,
    CallInsightDTO,
    FunctionInsightDTO,
    InsightValueDTO,
)


def _line(source: object) -> int | None:
    line = getattr(source, "lineno", None)
    return line if isinstance(line, int) else None


def _value_dto(value: InsightValue[int]) -> InsightValueDTO:
    return InsightValueDTO(type=value.type.value, value=int(value.value), derived=value.derived)


def function_insight(function: FunctionArtifact) -> FunctionInsightDTO:
    multi_path = get_multi_path(function)
    return FunctionInsightDTO(
        function=function.qualified_name,
        line=_line(function.source),
        path_count=len(multi_path),
        path_durations=[path.duration() for path in multi_path],
        estimated_duration=average_path_duration(multi_path),
    )


def call_insights(function: FunctionArtifact) -> list[CallInsightDTO]:
    calls: list[CallInsightDTO] = []
    for node in function.body.walk():
        if not isinstance(node, CallArtifact):
            continue
        duration = node.get_data(InsightKeys.FUNCTION_DURATION)
        if duration is None:
            continue
        resolved = node.resolved_function()
        source = node.get_data(InsightKeys.DURATION_SOURCE)
        if source is None:
            source = "paths" if duration.derived else "measured"
        calls.append(
            CallInsightDTO(
                function=function.qualified_name,
                callee=node.name,
                resolved=resolved.qualified_name if resolved is not None else None,
                line=_line(node.source),
                duration=_value_dto(duration),
                source=source,
            )
        )
    return calls


def build_report(parsed: ParsedModule) -> AnalysisReportDTO:
    return AnalysisReportDTO(
        path=str(parsed.path) if parsed.path is not None else None,
        language=parsed.language_id,
        module=parsed.module_name,
        functions=[function_insight(function) for function in parsed.functions],
        calls=[call for function in parsed.functions for call in call_insights(function)],
    )


def render_lines(report: AnalysisReportDTO) -> list[str]:
    lines: list[str] = []
    for call in report.calls:
        location = f"{report.path or report.module}:{call.line}" if call.line else report.module
        origin = "measured" if call.source == "measured" else "estimated"
        lines.append(
            f"{location}: {call.callee} -> {call.duration.value}ms ({origin}) in {call.function}"
        )
    for function in report.functions:
        if function.estimated_duration is None:
            continue
        lines.append(
            f"{function.function}: ~{function.estimated_duration}ms over {function.path_count} path(s)"
        )
    return lines
