"""Integration tests for csiguard.

These tests interact with a real Kubernetes cluster and require a valid
kubeconfig (KUBECONFIG or ~/.kube/config).

Tests are marked with @pytest.mark.integration and can be run with:
    pytest tests/integration/ -m integration

To skip integration tests:
    pytest -m "not integration"
"""
