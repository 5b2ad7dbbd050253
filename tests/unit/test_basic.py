"""Basic tests to verify project setup."""


def test_import_node_age_controller():
    """Test that node_age_controller package can be imported."""
    import node_age_controller

    assert node_age_controller.__version__ == "0.1.0"


def test_import_cli():
    """Test that CLI module can be imported."""
    from node_age_controller import cli

    assert cli.app is not None


def test_import_models():
    """Test that models module exports the node and policy types."""
    from node_age_controller import models

    assert models.Node is not None
    assert models.PolicyConfig is not None
    assert models.Decision is not None
