"""
Module: tests/test_sklearn_affinity.py
Description: Test the scikit-learn backed affinity propagation variant
Test: pytest tests/test_sklearn_affinity.py
"""

import numpy as np
import pytest

from apmodels import APSettings, SklearnAffinityPropagationModel


def line_distances(n):
    positions = np.arange(n, dtype=float) ** 1.5
    return np.abs(positions[:, None] - positions[None, :])


class TestSklearnAffinityPropagation:
    """Test SklearnAffinityPropagationModel."""

    def test_labels_are_exemplar_indices(self):
        model = SklearnAffinityPropagationModel(APSettings(random_seed=0))

        labels = model.cluster_matrix(line_distances(8))

        assert len(labels) == 8
        if len(model.get_exemplars()):
            assert set(labels.tolist()) <= set(model.get_exemplars().tolist())
        else:
            assert labels.tolist() == [0] * 8

    def test_max_preference_makes_every_item_an_exemplar(self):
        model = SklearnAffinityPropagationModel(APSettings(preference='max', random_seed=0))

        labels = model.cluster_matrix(line_distances(6))

        assert labels.tolist() == list(range(6))

    def test_rejects_damping_below_half(self):
        model = SklearnAffinityPropagationModel(APSettings(damping_factor=0.2))

        with pytest.raises(ValueError):
            model.cluster_matrix(line_distances(4))

    def test_convergence_iter_param(self):
        model = SklearnAffinityPropagationModel()

        model.set_params(convergence_iter=30, damping_factor=0.7)

        assert model.convergence_iter == 30
        assert model.get_params()['convergence_iter'] == 30
        assert model.settings.damping_factor == 0.7
        damping = next(p for p in model.get_param_config() if p['name'] == 'damping_factor')
        assert damping['min'] == 0.5
