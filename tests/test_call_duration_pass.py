from __future__ import annotations

from sightline.config import PassConfig
from sightline.insight.analyzer import InsightAnalyzer
from sightline.insight.durations import MappingDurationStore
from sightline.insight.keys import InsightKeys, InsightType, InsightValue
from sightline.insight.passes.call_duration import (
    argument_signature,
    average_path_duration,
    effective_arguments,
    is_fully_resolved,
    resolve_arguments,
)
from sightline.insight.path import ProceduralPath
from tests.artifact_builders import Program, derived, eq, if_, lit, local, measured, param


def _duration(call) -> int | None:
    value = call.get_data(InsightKeys.FUNCTION_DURATION)
    return None if value is None else value.value


def _two_way_target(program: Program) -> None:
    """target(x): x == 1 -> slow (100ms), x == 2 -> fast (200ms)."""
    program.define("slow")
    program.define("fast")
    program.define(
        "target",
        ("x",),
        [
            if_(eq(param("x", 0), lit(1)), [program.call("slow")]),
            if_(eq(param("x", 0), lit(2)), [program.call("fast")]),
        ],
    )


def _path_with_duration(function, duration: int | None) -> ProceduralPath:
    path = ProceduralPath(function)
    if duration is not None:
        path.data.set(
            InsightKeys.PATH_DURATION,
            InsightValue.of(InsightType.PATH_DURATION, duration).as_derived(),
        )
    return path


def test_average_excludes_paths_without_duration(program: Program) -> None:
    function = program.define("f")
    paths = [_path_with_duration(function, d) for d in (100, 200, None)]
    assert average_path_duration(paths) == 150
    assert average_path_duration([_path_with_duration(function, None)]) is None
    assert average_path_duration([]) is None


def test_average_truncates(program: Program) -> None:
    function = program.define("f")
    paths = [_path_with_duration(function, d) for d in (1, 2)]
    assert average_path_duration(paths) == 1


def test_literal_argument_selects_matching_paths(program: Program) -> None:
    _two_way_target(program)
    call = program.call("target", lit(1))
    caller = program.define("caller", (), [call])
    store = MappingDurationStore({"slow": 100, "fast": 200})

    InsightAnalyzer(duration_store=store).analyze(caller)

    # x = 1 rules out both paths through the x == 2 branch and the else of x == 1.
    assert _duration(call) == 100
    assert call.get_data(InsightKeys.FUNCTION_DURATION).derived is True


def test_unknown_argument_keeps_every_path(program: Program) -> None:
    _two_way_target(program)
    call = program.call("target", local("value"))
    caller = program.define("caller", (), [call])
    store = MappingDurationStore({"slow": 100, "fast": 200})

    InsightAnalyzer(duration_store=store).analyze(caller)

    # Paths: slow+fast=300, slow=100, fast=200, neither=0.
    assert _duration(call) == 150


def test_measured_callee_duration_overrides_average(program: Program) -> None:
    _two_way_target(program)
    call = program.call("target", lit(1))
    caller = program.define("caller", (), [call])
    store = MappingDurationStore({"slow": 100, "fast": 200, "target": 42})

    InsightAnalyzer(duration_store=store).analyze(caller)

    assert _duration(call) == 42
    assert call.get_data(InsightKeys.FUNCTION_DURATION).derived is True


def test_measured_value_on_callee_node_is_used(program: Program) -> None:
    callee = program.define("callee")
    callee.set_data(InsightKeys.FUNCTION_DURATION, measured(75))
    call = program.call("callee")
    caller = program.define("caller", (), [call])

    InsightAnalyzer().analyze(caller)

    assert _duration(call) == 75


def test_unresolved_call_gets_no_insight(program: Program) -> None:
    call = program.call("missing", lit(1))
    caller = program.define("caller", (), [call])

    InsightAnalyzer(duration_store=MappingDurationStore({"missing": 5})).analyze(caller)

    assert call.has_data(InsightKeys.FUNCTION_DURATION) is False


def test_call_arguments_are_propagated_even_when_unresolved(program: Program) -> None:
    target = program.define("target", ("x",))
    call = program.call("target", param("y", 0))
    program.define("caller", ("y",), [call])

    InsightAnalyzer().analyze(program.functions["caller"])

    propagated = target.get_data(InsightKeys.CALL_ARGS)
    assert propagated == [call.arguments[0]]
    assert is_fully_resolved(propagated) is False


def test_parameter_arguments_skip_aggregation_but_keep_override(program: Program) -> None:
    _two_way_target(program)
    call = program.call("target", param("y", 0))
    caller = program.define("caller", ("y",), [call])
    store = MappingDurationStore({"slow": 100, "fast": 200})

    InsightAnalyzer(duration_store=store).analyze(caller)
    assert call.has_data(InsightKeys.FUNCTION_DURATION) is False

    store.record("target", 9)
    InsightAnalyzer(duration_store=store).analyze(caller)
    assert _duration(call) == 9


def test_wrapper_chain_substitutes_caller_arguments(program: Program) -> None:
    program.define("slow")
    program.define("fast")
    program.define(
        "target",
        ("mode",),
        [if_(eq(param("mode", 0), lit(1)), [program.call("slow")], [program.call("fast")])],
    )
    inner = program.call("target", param("x", 0))
    program.define("wrapper", ("x",), [inner])
    outer = program.call("wrapper", lit(1))
    program.define("main", (), [outer])
    store = MappingDurationStore({"slow": 500, "fast": 10})

    InsightAnalyzer(duration_store=store).analyze(program.module())

    assert _duration(inner) == 500
    assert _duration(outer) == 500


def test_resolve_arguments_substitutes_enclosing_call_args(program: Program) -> None:
    inner = program.call("target", param("x", 0), lit("literal"), local("other"))
    wrapper = program.define("wrapper", ("x",), [inner])
    program.define("target", ("a", "b", "c"))

    assert resolve_arguments(inner) == list(inner.arguments)

    supplied = lit(7)
    wrapper.set_data(InsightKeys.CALL_ARGS, [supplied])
    resolved = resolve_arguments(inner)
    assert resolved[0] is supplied
    assert resolved[1:] == list(inner.arguments[1:])


def test_disabled_resolved_function_analysis_still_applies_measured(program: Program) -> None:
    _two_way_target(program)
    call = program.call("target", lit(1))
    caller = program.define("caller", (), [call])
    store = MappingDurationStore({"slow": 100, "fast": 200, "target": 33})
    config = PassConfig(analyze_resolved_functions=False)

    InsightAnalyzer(config=config, duration_store=store).analyze(caller)

    assert _duration(call) == 33
    inner_calls = [
        node
        for node in program.functions["target"].walk()
        if node is not call and node.has_data(InsightKeys.FUNCTION_DURATION)
    ]
    assert inner_calls == []


def test_disabled_analysis_without_measurement_gives_nothing(program: Program) -> None:
    _two_way_target(program)
    call = program.call("target", lit(1))
    caller = program.define("caller", (), [call])
    config = PassConfig(analyze_resolved_functions=False)
    store = MappingDurationStore({"slow": 100, "fast": 200})

    InsightAnalyzer(config=config, duration_store=store).analyze(caller)

    assert call.has_data(InsightKeys.FUNCTION_DURATION) is False


def test_analysis_is_idempotent(program: Program) -> None:
    _two_way_target(program)
    first_call = program.call("target", lit(2))
    second_call = program.call("target", local("v"))
    program.define("caller", (), [first_call, second_call])
    store = MappingDurationStore({"slow": 100, "fast": 200})
    analyzer = InsightAnalyzer(duration_store=store)

    analyzer.analyze(program.module())
    before = (
        first_call.get_data(InsightKeys.FUNCTION_DURATION),
        second_call.get_data(InsightKeys.FUNCTION_DURATION),
        [p.duration() for p in program.functions["caller"].get_data(InsightKeys.PROCEDURAL_MULTI_PATH)],
    )
    analyzer.analyze(program.module())
    after = (
        first_call.get_data(InsightKeys.FUNCTION_DURATION),
        second_call.get_data(InsightKeys.FUNCTION_DURATION),
        [p.duration() for p in program.functions["caller"].get_data(InsightKeys.PROCEDURAL_MULTI_PATH)],
    )
    assert before == after
    assert before[0].value == 200


def test_shared_wrapper_is_reanalyzed_for_each_call_site(program: Program) -> None:
    program.define("h")
    program.define("k", ("y",), [if_(eq(param("y", 0), lit(1)), [program.call("h")])])
    program.define("g", ("x",), [program.call("k", param("x", 0))])
    first = program.call("g", lit(1))
    program.define("f1", (), [first])
    second = program.call("g", lit(2))
    program.define("f2", (), [second])
    module = program.module()
    analyzer = InsightAnalyzer(duration_store=MappingDurationStore({"h": 100}))

    for _ in range(2):
        analyzer.analyze(module)
        assert (_duration(first), _duration(second)) == (100, 0)


def test_cached_paths_are_reused_for_the_same_arguments(program: Program) -> None:
    _two_way_target(program)
    first = program.call("target", lit(1))
    second = program.call("target", lit(1))
    program.define("caller", (), [first, second])
    target = program.functions["target"]
    store = MappingDurationStore({"slow": 100, "fast": 200})

    InsightAnalyzer(duration_store=store).analyze(program.functions["caller"])

    assert target.get_data(InsightKeys.ANALYZED_ARGS) == ((int, 1),)
    assert (_duration(first), _duration(second)) == (100, 100)


def test_argument_signature_distinguishes_values_and_types(program: Program) -> None:
    assert argument_signature([lit(1)]) == argument_signature([lit(1)])
    assert argument_signature([lit(1)]) != argument_signature([lit(True)])
    assert argument_signature([local("a")]) == argument_signature([param("x", 0)])
    target = program.define("target", ("x",))
    assert effective_arguments(target) == list(target.parameters)
    supplied = lit(3)
    target.set_data(InsightKeys.CALL_ARGS, [supplied])
    assert effective_arguments(target) == [supplied]


def test_stale_derived_duration_is_dropped(program: Program) -> None:
    _two_way_target(program)
    call = program.call("target", param("y", 0))
    caller = program.define("caller", ("y",), [call])
    call.set_data(InsightKeys.FUNCTION_DURATION, derived(5))
    call.set_data(InsightKeys.DURATION_SOURCE, "paths")

    InsightAnalyzer(duration_store=MappingDurationStore({"slow": 100})).analyze(caller)

    assert call.has_data(InsightKeys.FUNCTION_DURATION) is False
    assert call.has_data(InsightKeys.DURATION_SOURCE) is False


def test_measured_value_on_call_is_kept(program: Program) -> None:
    program.define("callee")
    call = program.call("callee")
    caller = program.define("caller", (), [call])
    call.set_data(InsightKeys.FUNCTION_DURATION, measured(7))

    InsightAnalyzer(duration_store=MappingDurationStore({"callee": 3})).analyze(caller)

    assert call.get_data(InsightKeys.FUNCTION_DURATION) == measured(7)
    assert call.has_data(InsightKeys.DURATION_SOURCE) is False


def test_duration_source_records_the_override(program: Program) -> None:
    _two_way_target(program)
    estimated = program.call("target", lit(1))
    program.define("caller", (), [estimated])
    store = MappingDurationStore({"slow": 100, "fast": 200})

    InsightAnalyzer(duration_store=store).analyze(program.functions["caller"])
    assert estimated.get_data(InsightKeys.DURATION_SOURCE) == "paths"

    store.record("target", 42)
    InsightAnalyzer(duration_store=store).analyze(program.functions["caller"])
    assert estimated.get_data(InsightKeys.DURATION_SOURCE) == "measured"
    assert _duration(estimated) == 42
