"""
Property-based tests for union and difference of file lists.

**Feature: build-file-lists, Property 3: Union membership and roots**
**Feature: build-file-lists, Property 4: Difference membership**
**Feature: build-file-lists, Property 5: Composite flattening**
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from buildfiles.core.file_list import Composite, FileList, Paths
from buildfiles.core.glob import Glob
from buildfiles.core.path import Path
from buildfiles.infrastructure.fakes import InMemoryFileSystem

ROOTS = ["/src", "/lib", "/src/sub"]
NAMES = ["a.c", "b.c", "c.h", ".d.c", "e.txt"]

# Every path the strategies can produce, for membership checks.
UNIVERSE = [Path.join(root, name) for root in ROOTS for name in NAMES]

FILESYSTEM = InMemoryFileSystem()
for _path in UNIVERSE:
    FILESYSTEM.add_file(_path)


@st.composite
def path_strategy(draw):
    return Path.join(draw(st.sampled_from(ROOTS)), draw(st.sampled_from(NAMES)))


@st.composite
def paths_strategy(draw):
    return Paths(draw(st.lists(path_strategy(), max_size=6)))


@st.composite
def glob_strategy(draw):
    root = draw(st.sampled_from(ROOTS))
    pattern = draw(st.sampled_from(["*.c", "*", "**/*.c", "*.h", ".*"]))
    return Glob(root, pattern, FILESYSTEM)


def list_strategy():
    """Generate explicit lists, globs and unions of both."""
    leaf = st.one_of(paths_strategy(), glob_strategy())
    return st.one_of(leaf, st.builds(lambda a, b: a + b, leaf, leaf))


@given(a=list_strategy(), b=list_strategy(), x=path_strategy())
@settings(max_examples=100)
def test_union_membership(a: FileList, b: FileList, x: Path):
    """
    **Feature: build-file-lists, Property 3: Union membership and roots**

    (a + b) includes x exactly when a or b does, and its roots cover both.
    """
    union = a + b

    assert union.includes(x) == (a.includes(x) or b.includes(x))
    assert set(a.roots) | set(b.roots) <= set(union.roots)


@given(a=list_strategy(), b=list_strategy(), x=path_strategy())
@settings(max_examples=100)
def test_difference_membership(a: FileList, b: FileList, x: Path):
    """
    **Feature: build-file-lists, Property 4: Difference membership**

    (a - b) includes x exactly when a does and b does not, and iterating the
    difference never yields a member of b.
    """
    difference = a - b

    assert difference.includes(x) == (a.includes(x) and not b.includes(x))

    for path in difference:
        assert not b.includes(path)


@given(a=list_strategy(), b=list_strategy(), c=list_strategy())
@settings(max_examples=100)
def test_repeated_difference(a: FileList, b: FileList, c: FileList):
    """Subtracting twice removes the members of both lists."""
    members = list((a - b) - c)

    assert members == [path for path in a if not b.includes(path) and not c.includes(path)]


@given(x=paths_strategy(), y=paths_strategy(), z=paths_strategy())
@settings(max_examples=100)
def test_composite_flattening(x: Paths, y: Paths, z: Paths):
    """
    **Feature: build-file-lists, Property 5: Composite flattening**

    A nested composite iterates exactly like the flat one.
    """
    nested = Composite([Composite([x, y]), z])
    flat = Composite([x, y, z])

    assert list(nested) == list(flat)
    assert nested.count() == flat.count() == x.count() + y.count() + z.count()
    assert nested == flat


@given(a=list_strategy())
@settings(max_examples=100)
def test_iterated_members_are_included(a: FileList):
    """Every path a list yields is included in it."""
    for path in a:
        assert a.includes(path)


@given(a=paths_strategy(), root=st.sampled_from(["/out", "/tmp/build"]))
@settings(max_examples=100)
def test_rebase_keeps_count_and_relative_paths(a: Paths, root: str):
    """Rebasing a list maps every member onto the new root."""
    rebased = a.rebase(root)

    assert [path.relative_path for path in rebased] == [path.relative_path for path in a]
    assert all(path.root == root for path in rebased)
