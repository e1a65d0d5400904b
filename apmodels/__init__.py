"""
Exemplar clustering models.

This package provides a small, extensible framework for clustering from
pairwise distances alone. Each model follows the interface defined by
BaseClusterModel: an item count and a distance oracle in, one exemplar
index per item out.
"""

from apmodels.base import BaseClusterModel
from apmodels.settings import APSettings, PreferenceChoice
from apmodels.affinity_propagation import AffinityPropagationModel
from apmodels.sklearn_affinity import SklearnAffinityPropagationModel
from apmodels.runner import ModelRunner, ExperimentResult, create_experiment_configs

# Model registry for easy access
MODEL_REGISTRY = {
    'affinity_propagation': AffinityPropagationModel,
    'sklearn_affinity_propagation': SklearnAffinityPropagationModel
}

# Display names for UI
MODEL_NAMES = {
    'affinity_propagation': 'Affinity Propagation',
    'sklearn_affinity_propagation': 'Affinity Propagation (scikit-learn)'
}


def get_model(name: str) -> BaseClusterModel:
    """
    Factory function to get a model instance by name.

    Args:
        name: Model key ('affinity_propagation', 'sklearn_affinity_propagation')

    Returns:
        Instance of the requested model
    """
    if name not in MODEL_REGISTRY:
        raise ValueError(f"Unknown model: {name}. Available: {list(MODEL_REGISTRY.keys())}")
    return MODEL_REGISTRY[name]()


def list_models():
    """Get list of available model names."""
    return list(MODEL_REGISTRY.keys())


__all__ = [
    'BaseClusterModel',
    'APSettings',
    'PreferenceChoice',
    'AffinityPropagationModel',
    'SklearnAffinityPropagationModel',
    'ModelRunner',
    'ExperimentResult',
    'create_experiment_configs',
    'MODEL_REGISTRY',
    'MODEL_NAMES',
    'get_model',
    'list_models'
]
