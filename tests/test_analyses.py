"""Tests for flowscan.dataflow.analyses"""

import pytest
from flowscan.cfg import ControlFlowGraph
from flowscan.facts import FactEntry, FactTable
from flowscan.dataflow.analyses import (
    ANALYSES, AvailableExpressions, LiveVariables, ReachingDefinitions,
    VeryBusyExpressions, get_analysis, BOUNDARY_EMPTY,
)
from flowscan.dataflow.engine import DataflowEngine, Direction
from flowscan.dataflow.lattice import Meet
from flowscan.dataflow.tokens import DefinitionSite, Expression, VariableName
from flowscan.models import Severity


def codes(record):
    return [issue.code for issue in record.issues]


class TestAnalysisConfiguration:
    def test_registry_order(self):
        assert list(ANALYSES.keys()) == ["reaching", "live", "available", "busy"]

    @pytest.mark.parametrize("name,direction,meet", [
        ("reaching", Direction.FORWARD, Meet.UNION),
        ("live", Direction.BACKWARD, Meet.UNION),
        ("available", Direction.FORWARD, Meet.INTERSECTION),
        ("busy", Direction.BACKWARD, Meet.INTERSECTION),
    ])
    def test_direction_and_meet(self, name, direction, meet):
        analysis = get_analysis(name)
        assert analysis.direction is direction
        assert analysis.meet is meet

    def test_unknown_analysis(self):
        with pytest.raises(ValueError, match="Unknown analysis"):
            get_analysis("constant-propagation")

    def test_exposed_set_names(self, program):
        cfg, facts = program("int a = x + y;")
        names = {
            name: list(get_analysis(name).run(cfg, facts).records[0].sets)
            for name in ANALYSES
        }
        assert names == {
            "reaching": ["reaching"],
            "live": ["liveIn", "liveOut"],
            "available": ["availableIn", "availableOut"],
            "busy": ["busyIn", "busyOut"],
        }

    def test_each_analysis_owns_its_store(self, program):
        cfg, facts = program("int x = 5;\nint y = x + 1;")
        reaching = ReachingDefinitions()
        live = LiveVariables()
        reaching.run(cfg, facts)
        live.run(cfg, facts)

        assert reaching.store is not live.store
        node = cfg.statement_nodes()[0]
        assert reaching.store[node.id].gen == {DefinitionSite("x", 1)}
        assert live.store[node.id].kill == {VariableName("x")}
        assert reaching.store[node.id].gen is not live.store[node.id].gen


class TestReachingDefinitions:
    def test_redefinition_kills_earlier_definition(self, program):
        cfg, facts = program("int x=5;\nint y=x;\nx=10;\nint z=x;")
        result = ReachingDefinitions().run(cfg, facts)

        record = result.record_for_line(4)
        assert record.statement == "int z=x;"
        assert set(record.get_set("reaching")) == {"x@L3", "y@L2"}
        assert "x@L1" not in record.get_set("reaching")

    def test_kill_covers_later_definitions(self, program):
        cfg, facts = program("int x=5;\nx=10;")
        analysis = ReachingDefinitions()
        analysis.run(cfg, facts)

        first, second = cfg.statement_nodes()
        assert analysis.store[first.id].kill == {DefinitionSite("x", 2)}
        assert analysis.store[second.id].kill == {DefinitionSite("x", 1)}

    def test_uninitialized_use(self, program):
        cfg, facts = program("int y = x + 5;")
        result = ReachingDefinitions().run(cfg, facts)

        warnings = [i for i in result.issues if i.severity == Severity.WARNING]
        assert len(warnings) == 1
        assert warnings[0].code == "uninitialized-use"
        assert warnings[0].variable == "x"
        assert "'x'" in warnings[0].message
        assert result.records[0].line == 1

    def test_merge_point(self, diamond_program):
        cfg, facts, (n1, n2, n3, n4, n5) = diamond_program
        result = ReachingDefinitions().run(cfg, facts)

        record = result.record_for_line(5)
        assert record.get_set("reaching") == ("x@L1", "x@L4", "y@L3")
        assert codes(record) == []
        assert codes(result.record_for_line(3)) == ["uninitialized-use"]

    def test_loop_multiple_definitions(self, loop_program):
        cfg, facts, _ = loop_program
        result = ReachingDefinitions().run(cfg, facts)

        increment = result.record_for_line(4)
        assert increment.get_set("reaching") == ("i@L1", "i@L4", "s@L3")
        assert codes(increment) == ["multiple-definitions"]
        assert increment.issues[0].severity == Severity.INFO
        assert codes(result.record_for_line(5)) == []

    def test_missing_fact_entries(self):
        cfg = ControlFlowGraph()
        node = cfg.add_node("mystery();", 1)
        cfg.add_edge(cfg.entry, node)
        cfg.finalize()

        result = ReachingDefinitions().run(cfg, FactTable())

        assert result.converged
        assert len(result.records) == 1
        assert result.records[0].issues == ()
        assert result.records[0].get_set("reaching") == ()


class TestLiveVariables:
    def test_dead_store(self, program):
        cfg, facts = program("int x=5;\nint y=10;\nint z=x+1;")
        result = LiveVariables().run(cfg, facts)

        assert "dead-store" in codes(result.record_for_line(2))
        assert result.record_for_line(2).issues[0].variable == "y"
        assert result.record_for_line(1).get_set("liveOut") == ("x",)
        assert codes(result.record_for_line(1)) == []

    def test_self_assignment_keeps_variable_live(self, program):
        cfg, facts = program("int i = 0;\ni = i + 1;\nreturn i;")
        result = LiveVariables().run(cfg, facts)

        assert result.record_for_line(2).get_set("liveIn") == ("i",)
        assert all(codes(r) == [] for r in result.records)

    def test_loop_has_no_dead_stores(self, loop_program):
        cfg, facts, _ = loop_program
        result = LiveVariables().run(cfg, facts)

        assert result.issues == []
        assert result.record_for_line(2).get_set("liveIn") == ("a", "b", "i", "n", "s")


class TestAvailableExpressions:
    def test_redefinition_kills_expression(self, program):
        cfg, facts = program("int a=x+y;\nx=10;\nint b=x+y;")
        result = AvailableExpressions().run(cfg, facts)

        assert result.record_for_line(3).get_set("availableIn") == ()
        assert result.record_for_line(1).get_set("availableOut") == ("x + y",)
        assert result.record_for_line(2).get_set("availableOut") == ()

    def test_universal_boundary_at_entry(self, program):
        cfg, facts = program("int a=x+y;")
        result = AvailableExpressions().run(cfg, facts)

        assert result.record_for_line(1).get_set("availableIn") == ("x + y",)

    def test_empty_boundary_at_entry(self, program):
        cfg, facts = program("int a=x+y;")
        result = AvailableExpressions(must_boundary=BOUNDARY_EMPTY).run(cfg, facts)

        assert result.record_for_line(1).get_set("availableIn") == ()

    def test_merge_point_intersection(self, diamond_program):
        cfg, facts, _ = diamond_program
        result = AvailableExpressions().run(cfg, facts)

        assert result.record_for_line(3).get_set("availableOut") == ("x + z",)
        assert result.record_for_line(5).get_set("availableIn") == ()

    def test_loop_depends_on_boundary_policy(self, loop_program):
        cfg, facts, _ = loop_program

        universal = AvailableExpressions().run(cfg, facts)
        empty = AvailableExpressions(must_boundary=BOUNDARY_EMPTY).run(cfg, facts)

        assert universal.converged and empty.converged
        assert universal.record_for_line(2).get_set("availableIn") == ("a + b",)
        assert empty.record_for_line(2).get_set("availableIn") == ()
        assert empty.record_for_line(4).get_set("availableOut") == ("a + b", "i + 1")

    def test_no_issues_without_hints(self, program):
        cfg, facts = program("int a=x+y;\nint b=x+y;")
        result = AvailableExpressions(must_boundary=BOUNDARY_EMPTY).run(cfg, facts)
        assert result.issues == []

    def test_redundant_computation_hint(self, program):
        cfg, facts = program("int a=x+y;\nint b=x+y;")
        analysis = AvailableExpressions(must_boundary=BOUNDARY_EMPTY, optimization_hints=True)
        result = analysis.run(cfg, facts)

        assert codes(result.record_for_line(1)) == []
        assert codes(result.record_for_line(2)) == ["redundant-computation"]


class TestVeryBusyExpressions:
    def test_expression_busy_before_reuse(self, program):
        cfg, facts = program("int a=x+y;\nint b=x+y;")
        result = VeryBusyExpressions().run(cfg, facts)

        assert "x + y" in result.record_for_line(1).get_set("busyOut")
        assert result.record_for_line(1).get_set("busyIn") == ("x + y",)

    def test_empty_boundary_at_exit(self, program):
        cfg, facts = program("int a=x+y;\nint b=x+y;")
        result = VeryBusyExpressions(must_boundary=BOUNDARY_EMPTY).run(cfg, facts)

        assert result.record_for_line(1).get_set("busyOut") == ("x + y",)
        assert result.record_for_line(2).get_set("busyOut") == ()

    def test_redefinition_blocks_busy(self, program):
        cfg, facts = program("int a=x+y;\nx=1;\nint b=x+y;")
        result = VeryBusyExpressions().run(cfg, facts)

        assert result.record_for_line(1).get_set("busyOut") == ()

    def test_split_point_intersection(self, diamond_program):
        cfg, facts, _ = diamond_program
        result = VeryBusyExpressions().run(cfg, facts)

        assert result.record_for_line(3).get_set("busyIn") == ("x + z",)
        assert result.record_for_line(2).get_set("busyOut") == ()

    def test_loop(self, loop_program):
        cfg, facts, _ = loop_program
        result = VeryBusyExpressions(must_boundary=BOUNDARY_EMPTY).run(cfg, facts)

        assert result.converged
        assert result.record_for_line(3).get_set("busyIn") == ("a + b", "i + 1")
        assert result.record_for_line(4).get_set("busyIn") == ("i + 1",)
        assert result.record_for_line(2).get_set("busyOut") == ()

    def test_hoistable_expression_hint(self, program):
        cfg, facts = program("int a=x+y;\nint b=x+y;")
        analysis = VeryBusyExpressions(must_boundary=BOUNDARY_EMPTY, optimization_hints=True)
        result = analysis.run(cfg, facts)

        assert codes(result.record_for_line(1)) == ["hoistable-expression"]
        assert codes(result.record_for_line(2)) == []


class TestExpressionKill:
    def test_kill_uses_whole_program_expressions(self, program):
        cfg, facts = program("x = 1;\nint a = x + y;\nint b = y * 2;")
        analysis = AvailableExpressions()
        analysis.run(cfg, facts)

        first = cfg.statement_nodes()[0]
        assert analysis.store[first.id].kill == {Expression("x + y")}
        assert analysis.store[first.id].gen == set()

    def test_engine_is_shared_but_stores_are_not(self, program):
        cfg, facts = program("int a = x + y;")
        engine = DataflowEngine(max_iterations=10)
        available = AvailableExpressions(engine=engine)
        busy = VeryBusyExpressions(engine=engine)
        available.run(cfg, facts)
        busy.run(cfg, facts)

        assert available.engine is busy.engine
        assert available.store is not busy.store


class TestUnreachableNodes:
    @pytest.fixture
    def graph_with_isolated_node(self):
        cfg = ControlFlowGraph()
        n1 = cfg.add_node("a = x + y", 1)
        n2 = cfg.add_node("b = p + q", 2)
        isolated = cfg.add_node("print(a)", 3)
        cfg.add_edge(cfg.entry, n1)
        cfg.add_edge(n1, n2)
        cfg.finalize()
        facts = FactTable({
            n1.id: FactEntry(kind="assign", defined="a", used=("x", "y"), expressions=("x + y",)),
            n2.id: FactEntry(kind="assign", defined="b", used=("p", "q"), expressions=("p + q",)),
            isolated.id: FactEntry(kind="use", used=("a",)),
        })
        return cfg, facts

    def test_isolated_node_has_no_available_expressions(self, graph_with_isolated_node):
        cfg, facts = graph_with_isolated_node
        result = AvailableExpressions().run(cfg, facts)

        assert result.converged
        record = result.record_for_line(3)
        assert record.get_set("availableIn") == ()
        assert record.get_set("availableOut") == ()
        assert result.record_for_line(2).get_set("availableOut") == ("p + q", "x + y")

    def test_isolated_node_reaching_is_empty(self, graph_with_isolated_node):
        cfg, facts = graph_with_isolated_node
        result = ReachingDefinitions().run(cfg, facts)

        assert result.record_for_line(3).get_set("reaching") == ()
        assert codes(result.record_for_line(3)) == ["uninitialized-use"]
