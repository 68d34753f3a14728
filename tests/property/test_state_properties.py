"""
Property-based tests for State snapshots and the dirty decision.

**Feature: build-file-lists, Property 6: Re-snapshotting an unchanged tree reports nothing**
**Feature: build-file-lists, Property 7: Duplicates never produce spurious deltas**
**Feature: build-file-lists, Property 8: Outputs are dirty exactly when older than an input**
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from buildfiles.core.file_list import Paths
from buildfiles.core.path import Path
from buildfiles.core.state import State, is_dirty
from buildfiles.infrastructure.fakes import InMemoryFileSystem

NAMES = ["a.c", "b.c", "c.h", "d.rb", ".e.rb"]

mtimes = st.floats(min_value=1.0, max_value=1e9, allow_nan=False, allow_infinity=False)


@st.composite
def tree_strategy(draw):
    """Generate an in-memory tree and the explicit list of some of its files."""
    filesystem = InMemoryFileSystem()
    present = draw(st.lists(st.sampled_from(NAMES), unique=True, max_size=len(NAMES)))
    for name in present:
        filesystem.add_file("/src/" + name, mtime=draw(mtimes))

    listed = draw(st.lists(st.sampled_from(NAMES), max_size=8))
    files = Paths([Path.join("/src", name) for name in listed])
    return filesystem, files


@given(tree=tree_strategy())
@settings(max_examples=100)
def test_update_is_idempotent(tree):
    """
    **Feature: build-file-lists, Property 6: Re-snapshotting an unchanged tree reports nothing**

    Without filesystem changes, a second update reports no added, changed or
    removed paths; only paths that are still missing remain reported.
    """
    filesystem, files = tree
    state = State(files, filesystem)

    updated = state.update()

    assert state.added == []
    assert state.changed == []
    assert state.removed == []
    assert updated == bool(state.missing)


@given(tree=tree_strategy())
@settings(max_examples=100)
def test_duplicates_are_reported_once(tree):
    """
    **Feature: build-file-lists, Property 7: Duplicates never produce spurious deltas**
    """
    filesystem, files = tree
    state = State(files + files, filesystem)

    assert len(state.added) == len(set(state.added))
    assert len(state.missing) == len(set(state.missing))

    state.update()

    assert state.removed == []
    assert state.changed == []


@given(
    input_times=st.lists(mtimes, min_size=1, max_size=4),
    output_times=st.lists(mtimes, min_size=1, max_size=4),
)
@settings(max_examples=100)
def test_dirty_when_any_input_is_newer(input_times: list[float], output_times: list[float]):
    """
    **Feature: build-file-lists, Property 8: Outputs are dirty exactly when older than an input**
    """
    filesystem = InMemoryFileSystem()
    inputs = []
    outputs = []

    for index, mtime in enumerate(input_times):
        path = Path.join("/src", f"input{index}.c")
        filesystem.add_file(path, mtime=mtime)
        inputs.append(path)

    for index, mtime in enumerate(output_times):
        path = Path.join("/build", f"output{index}.o")
        filesystem.add_file(path, mtime=mtime)
        outputs.append(path)

    input_state = State(Paths(inputs), filesystem)
    output_state = State(Paths(outputs), filesystem)

    expected = max(input_times) > min(output_times)

    assert is_dirty(input_state, output_state) == expected
    assert output_state.is_dirty(input_state) == expected
