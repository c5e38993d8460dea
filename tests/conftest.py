"""Shared test fixtures for FlowScan test suite."""

import sys
import pytest
from pathlib import Path

# Ensure flowscan is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from flowscan.cfg import CFGBuilder, ControlFlowGraph
from flowscan.facts import FactEntry, FactExtractor, FactTable
from flowscan.language_loader import LanguageLoader

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def build_program(source, language="java"):
    """Build (cfg, facts) for a source text with the packaged profile."""
    profile = LanguageLoader().get_profile(language)
    cfg = CFGBuilder(profile).build(source)
    facts = FactTable.from_graph(cfg, FactExtractor(profile))
    return cfg, facts


@pytest.fixture
def program():
    """build_program as a fixture: program(source, language='java') -> (cfg, facts)."""
    return build_program


@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def java_profile():
    return LanguageLoader().get_profile("java")


@pytest.fixture
def cpp_profile():
    return LanguageLoader().get_profile("cpp")


@pytest.fixture
def java_extractor(java_profile):
    return FactExtractor(java_profile)


@pytest.fixture
def example_java_source():
    return (FIXTURES_DIR / "Example.java").read_text()


@pytest.fixture
def example_cpp_source():
    return (FIXTURES_DIR / "example.cpp").read_text()


@pytest.fixture
def example_java_file(tmp_path):
    """Write the Java fixture to tmp and return path."""
    content = (FIXTURES_DIR / "Example.java").read_text()
    target = tmp_path / "Example.java"
    target.write_text(content)
    return target


@pytest.fixture
def diamond_program():
    """
    Hand-built if/else diamond:

        L1: x = 1
        L2: if (c)           -> L3 | L4
        L3: y = x + z
        L4: x = 2
        L5: print(y + x)     <- L3, L4
    """
    cfg = ControlFlowGraph()
    n1 = cfg.add_node("x = 1", 1)
    n2 = cfg.add_node("if (c)", 2)
    n3 = cfg.add_node("y = x + z", 3)
    n4 = cfg.add_node("x = 2", 4)
    n5 = cfg.add_node("print(y + x)", 5)
    cfg.add_edge(cfg.entry, n1)
    cfg.add_edge(n1, n2)
    cfg.add_edge(n2, n3)
    cfg.add_edge(n2, n4)
    cfg.add_edge(n3, n5)
    cfg.add_edge(n4, n5)
    cfg.finalize()

    facts = FactTable({
        n1.id: FactEntry(kind="assign", defined="x"),
        n2.id: FactEntry(kind="use", used=("c",)),
        n3.id: FactEntry(kind="assign", defined="y", used=("x", "z"), expressions=("x + z",)),
        n4.id: FactEntry(kind="assign", defined="x"),
        n5.id: FactEntry(kind="use", used=("y", "x")),
    })
    return cfg, facts, (n1, n2, n3, n4, n5)


@pytest.fixture
def loop_program():
    """
    Hand-built while loop:

        L1: i = 0
        L2: while (i < n)    -> L3 | L5
        L3: s = a + b
        L4: i = i + 1        -> L2
        L5: print(s)
    """
    cfg = ControlFlowGraph()
    n1 = cfg.add_node("i = 0", 1)
    n2 = cfg.add_node("while (i < n)", 2)
    n3 = cfg.add_node("s = a + b", 3)
    n4 = cfg.add_node("i = i + 1", 4)
    n5 = cfg.add_node("print(s)", 5)
    cfg.add_edge(cfg.entry, n1)
    cfg.add_edge(n1, n2)
    cfg.add_edge(n2, n3)
    cfg.add_edge(n3, n4)
    cfg.add_edge(n4, n2)
    cfg.add_edge(n2, n5)
    cfg.finalize()

    facts = FactTable({
        n1.id: FactEntry(kind="assign", defined="i"),
        n2.id: FactEntry(kind="use", used=("i", "n")),
        n3.id: FactEntry(kind="assign", defined="s", used=("a", "b"), expressions=("a + b",)),
        n4.id: FactEntry(kind="assign", defined="i", used=("i",), expressions=("i + 1",)),
        n5.id: FactEntry(kind="use", used=("s",)),
    })
    return cfg, facts, (n1, n2, n3, n4, n5)
