"""Property-based tests for the cluster-wide cordon threshold."""

from factories import make_snapshot
from hypothesis import given
from hypothesis import strategies as st

from node_age_controller.models.policy import PolicyConfig
from node_age_controller.threshold import count_available, count_cordoned, evaluate


@st.composite
def cluster_shape(draw):
    total = draw(st.integers(min_value=0, max_value=30))
    cordoned = draw(st.integers(min_value=0, max_value=total))
    return total, cordoned


limits = st.integers(min_value=0, max_value=30)


@given(shape=cluster_shape(), max_cordoned=limits, min_available=limits)
def test_evaluate_matches_limits(shape, max_cordoned, min_available):
    """Blocked exactly when available <= minimum or cordoned >= maximum."""
    total, cordoned = shape
    snapshot = make_snapshot(total=total, cordoned=cordoned)
    config = PolicyConfig(max_cordoned_nodes=max_cordoned, min_available_nodes=min_available)

    assert count_cordoned(snapshot) == cordoned
    assert count_available(snapshot) == total - cordoned
    expected = (total - cordoned) <= min_available or cordoned >= max_cordoned
    assert evaluate(snapshot, config) is expected


@given(shape=cluster_shape(), max_cordoned=limits, min_available=limits)
def test_more_cordons_never_unblock(shape, max_cordoned, min_available):
    """Once blocked, cordoning one more node in the same cluster stays blocked."""
    total, cordoned = shape
    config = PolicyConfig(max_cordoned_nodes=max_cordoned, min_available_nodes=min_available)

    if cordoned < total and evaluate(make_snapshot(total, cordoned), config):
        assert evaluate(make_snapshot(total, cordoned + 1), config)


@given(shape=cluster_shape(), max_cordoned=limits, min_available=limits)
def test_permitted_cordon_respects_limits(shape, max_cordoned, min_available):
    """If a cordon is permitted, performing it keeps cordoned <= max and available >= min."""
    total, cordoned = shape
    config = PolicyConfig(max_cordoned_nodes=max_cordoned, min_available_nodes=min_available)

    if not evaluate(make_snapshot(total, cordoned), config):
        assert cordoned + 1 <= max_cordoned
        assert total - (cordoned + 1) >= min_available
