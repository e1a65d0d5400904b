"""Model runner for batch processing and comparison."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

import numpy as np
import pandas as pd

from apmodels.base import BaseClusterModel
from apmodels.affinity_propagation import AffinityPropagationModel
from apmodels.sklearn_affinity import SklearnAffinityPropagationModel
from apmodels.settings import PreferenceChoice
from aputils.priority_queue import PriorityQueue

logger = logging.getLogger(__name__)

# Metrics where a lower value is better
LOWER_IS_BETTER = ('davies_bouldin', 'total_distance')


@dataclass
class ExperimentResult:
    """Container for single experiment result."""
    model_name: str
    params: Dict[str, Any]
    labels: np.ndarray
    exemplars: np.ndarray
    metrics: Dict[str, Any]
    runtime: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for DataFrame."""
        return {
            'Model': self.model_name,
            'Parameters': self.params_string,
            'Preference': self.params.get('preference'),
            'Damping': self.params.get('damping_factor'),
            'Exemplars': len(self.exemplars),
            'Clusters': self.metrics.get('n_clusters', 0),
            'Silhouette': self.metrics.get('silhouette', 0),
            'Total Distance': self.metrics.get('total_distance', float('inf')),
            'Davies-Bouldin': self.metrics.get('davies_bouldin', float('inf')),
            'Calinski-Harabasz': self.metrics.get('calinski_harabasz', 0),
            'Runtime (s)': round(self.runtime, 3),
            'Valid': self.metrics.get('valid', False)
        }

    @property
    def params_string(self) -> str:
        """Format params for display."""
        return ", ".join(f"{k}={v}" for k, v in self.params.items())


def _metric_key(metric: str) -> Callable[[ExperimentResult], float]:
    """Score function where larger is always better."""
    if metric in LOWER_IS_BETTER:
        return lambda r: -r.metrics.get(metric, float('inf'))
    return lambda r: r.metrics.get(metric, 0)


class ModelRunner:
    """
    Run clustering experiments over a distance matrix with batch support.

    Supports running several models with several settings and comparing
    results.
    """

    # Registry of available models
    MODELS: Dict[str, Type[BaseClusterModel]] = {
        'affinity_propagation': AffinityPropagationModel,
        'sklearn_affinity_propagation': SklearnAffinityPropagationModel
    }

    def __init__(self):
        self.results: List[ExperimentResult] = []

    def get_available_models(self) -> Dict[str, Dict[str, Any]]:
        """Get info about all available models."""
        return {key: cls.get_info() for key, cls in self.MODELS.items()}

    def run_single(
        self,
        model_key: str,
        distance_matrix: np.ndarray,
        params: Optional[Dict[str, Any]] = None,
        X: Optional[np.ndarray] = None
    ) -> ExperimentResult:
        """
        Run a single model with given parameters.

        Args:
            model_key: Key from MODELS registry
            distance_matrix: Square distance matrix
            params: Model parameters (uses defaults if None)
            X: Optional feature array for feature-space metrics

        Returns:
            ExperimentResult with labels and metrics
        """
        if model_key not in self.MODELS:
            raise ValueError(f"Unknown model: {model_key}")

        model = self.MODELS[model_key]()

        if params:
            model.set_params(**params)

        start_time = time.time()
        labels = model.cluster_matrix(distance_matrix)
        runtime = time.time() - start_time

        metrics = model.get_metrics(distance_matrix, labels, X=X)
        logger.info("%s (%s): %d exemplars in %.3fs",
                    model.name, model.get_params_string(), len(model.exemplars_), runtime)

        return ExperimentResult(
            model_name=model.name,
            params=model.get_params(),
            labels=labels,
            exemplars=model.exemplars_,
            metrics=metrics,
            runtime=runtime
        )

    def run_batch(
        self,
        distance_matrix: np.ndarray,
        model_configs: List[Dict[str, Any]],
        progress_callback=None,
        X: Optional[np.ndarray] = None
    ) -> List[ExperimentResult]:
        """
        Run multiple experiments in batch.

        Args:
            distance_matrix: Square distance matrix
            model_configs: List of dicts with 'model' key and optional params
                Example: [
                    {'model': 'affinity_propagation', 'preference': 'median'},
                    {'model': 'affinity_propagation', 'preference': 'min'},
                    {'model': 'sklearn_affinity_propagation', 'damping_factor': 0.7}
                ]
            progress_callback: Optional callback(current, total) for progress
            X: Optional feature array for feature-space metrics

        Returns:
            List of ExperimentResult
        """
        self.results = []
        total = len(model_configs)

        for i, config in enumerate(model_configs):
            params = dict(config)
            model_key = params.pop('model')

            try:
                result = self.run_single(model_key, distance_matrix, params if params else None, X=X)
                self.results.append(result)
            except Exception as e:
                logger.warning("Experiment %s (%s) failed: %s", model_key, params, e)
                self.results.append(ExperimentResult(
                    model_name=model_key,
                    params=params,
                    labels=np.array([], dtype=int),
                    exemplars=np.array([], dtype=int),
                    metrics={'valid': False, 'error': str(e)},
                    runtime=0
                ))

            if progress_callback:
                progress_callback(i + 1, total)

        return self.results

    def run_preference_sweep(
        self,
        distance_matrix: np.ndarray,
        preferences: Sequence[str] = tuple(c.value for c in PreferenceChoice if c != PreferenceChoice.CONSTANT),
        damping_values: Sequence[float] = (0.5, 0.7, 0.9),
        max_iterations: int = 200,
        models: Sequence[str] = ('affinity_propagation',),
        progress_callback=None,
        X: Optional[np.ndarray] = None
    ) -> List[ExperimentResult]:
        """
        Run every model across a grid of preference policies and damping factors.

        Args:
            distance_matrix: Square distance matrix
            preferences: Preference policies to try
            damping_values: Damping factors to try
            max_iterations: Rounds per run
            models: Model keys to include
            progress_callback: Optional callback(current, total) for progress
            X: Optional feature array for feature-space metrics

        Returns:
            List of ExperimentResult
        """
        configs = create_experiment_configs(models, preferences, damping_values, max_iterations)
        return self.run_batch(distance_matrix, configs, progress_callback, X=X)

    def get_results_dataframe(self) -> pd.DataFrame:
        """Get results as pandas DataFrame."""
        if not self.results:
            return pd.DataFrame()

        data = [r.to_dict() for r in self.results]
        df = pd.DataFrame(data)

        # Sort by silhouette score (descending)
        df = df.sort_values('Silhouette', ascending=False)

        return df

    def get_best_result(self, metric: str = 'silhouette') -> Optional[ExperimentResult]:
        """
        Get best result by specified metric.

        Args:
            metric: 'silhouette', 'total_distance', 'davies_bouldin', or 'calinski_harabasz'

        Returns:
            Best ExperimentResult or None
        """
        top = self.get_top_n_results(1, metric)
        return top[0] if top else None

    def get_top_n_results(self, n: int = 5, metric: str = 'silhouette') -> List[ExperimentResult]:
        """Get top N valid results by specified metric."""
        if metric not in ('silhouette', 'total_distance', 'davies_bouldin', 'calinski_harabasz'):
            raise ValueError(f"Unknown metric: {metric}")

        queue = PriorityQueue(key=_metric_key(metric))
        for result in self.results:
            if result.metrics.get('valid', False):
                queue.push(result)

        top = []
        while not queue.is_empty and len(top) < n:
            top.append(queue.pop())
        return top

    def clear_results(self):
        """Clear all stored results."""
        self.results = []


def create_experiment_configs(
    models: Sequence[str],
    preferences: Sequence[str],
    damping_values: Sequence[float],
    max_iterations: int = 200
) -> List[Dict[str, Any]]:
    """
    Helper to create experiment configurations.

    Args:
        models: List of model keys ('affinity_propagation', ...)
        preferences: Preference policies
        damping_values: Damping factors
        max_iterations: Rounds per run

    Returns:
        List of config dicts for run_batch
    """
    configs = []

    for model in models:
        for preference in preferences:
            for damping in damping_values:
                # scikit-learn rejects damping below 0.5
                if model == 'sklearn_affinity_propagation' and damping < 0.5:
                    continue
                configs.append({
                    'model': model,
                    'preference': preference,
                    'damping_factor': damping,
                    'max_iterations': max_iterations
                })

    return configs
