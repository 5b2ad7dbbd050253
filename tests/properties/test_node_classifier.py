"""Property-based tests for node classification.

Covers the control-plane, ignore-annotation and age predicates.
"""

from datetime import timedelta

from factories import NOW, make_node
from hypothesis import given
from hypothesis import strategies as st

from node_age_controller.classifier import (
    CONTROL_PLANE_TAINT_KEYS,
    IGNORE_ANNOTATION,
    age_of,
    is_control_plane,
    is_ignored,
)
from node_age_controller.models.node import Node, NodeTaint

taint_effects = st.sampled_from(["NoSchedule", "PreferNoSchedule", "NoExecute"])
other_taint_keys = st.text(min_size=1, max_size=40).filter(
    lambda k: k not in CONTROL_PLANE_TAINT_KEYS
)


@st.composite
def taints(draw, key=other_taint_keys):
    return NodeTaint(
        key=draw(key),
        value=draw(st.none() | st.text(max_size=10)),
        effect=draw(taint_effects),
    )


@given(
    others=st.lists(taints(), max_size=5),
    control_plane=taints(key=st.sampled_from(sorted(CONTROL_PLANE_TAINT_KEYS))),
    position=st.integers(min_value=0, max_value=5),
)
def test_any_control_plane_taint_classifies_node(others, control_plane, position):
    """A control-plane taint anywhere in the list marks the node, whatever its value or effect."""
    node = make_node()
    node.taints.extend(others)
    node.taints.insert(position, control_plane)

    assert is_control_plane(node)


@given(others=st.lists(taints(), max_size=5))
def test_without_control_plane_taint_node_is_worker(others):
    node = make_node()
    node.taints.extend(others)

    assert not is_control_plane(node)


@given(value=st.text().filter(lambda v: v != "true"))
def test_only_exact_true_ignores_node(value):
    """Any annotation value other than the exact string "true" leaves the node in scope."""
    assert not is_ignored(make_node(ignore=value))


@given(
    annotations=st.dictionaries(
        st.text(max_size=20).filter(lambda k: k != IGNORE_ANNOTATION), st.text(max_size=10)
    )
)
def test_unrelated_annotations_do_not_ignore(annotations):
    node = Node(name="worker-1", creation_timestamp=NOW, annotations=annotations)

    assert not is_ignored(node)


@given(
    age=st.timedeltas(min_value=timedelta(days=-10), max_value=timedelta(days=3650)),
)
def test_age_is_now_minus_creation(age):
    """Age is exactly the elapsed time, negative values included."""
    assert age_of(make_node(age=age), NOW) == age
