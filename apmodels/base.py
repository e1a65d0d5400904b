"""Base class for all exemplar clustering models."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar
import numpy as np

from aputils.metrics import calculate_cluster_metrics

T = TypeVar('T')

DistanceFunc = Callable[[int, int], float]


class BaseClusterModel(ABC):
    """
    Abstract base class for clustering models driven by a distance oracle.

    Subclasses implement `cluster` for the index-pair form; the matrix and
    item forms are adapted onto it here so every model answers all three.
    Labels are item indices (the exemplar each item is assigned to), not
    compacted cluster ids.
    """

    name: str = "Base Model"
    description: str = "Base clustering model"
    supports_n_clusters: bool = False  # Exemplar models find the count themselves

    def __init__(self):
        self.labels_ = None
        self.exemplars_ = None

    @abstractmethod
    def get_param_config(self) -> List[Dict[str, Any]]:
        """
        Get parameter configuration for UI rendering.

        Returns:
            List of parameter configs, each with:
                - name: parameter name
                - type: 'int', 'float', 'select', 'bool'
                - default: default value
                - min/max/step: for numeric types
                - options: for select type
                - description: help text
        """
        pass

    @abstractmethod
    def set_params(self, **kwargs) -> None:
        """Set model parameters."""
        pass

    @abstractmethod
    def get_params(self) -> Dict[str, Any]:
        """Get current parameters."""
        pass

    @abstractmethod
    def cluster(self, n: int, distance: DistanceFunc) -> np.ndarray:
        """
        Cluster n items given a distance between item indices.

        Args:
            n: Number of items
            distance: Callable (i, j) -> distance between items i and j

        Returns:
            Array of length n holding the exemplar index of each item
        """
        pass

    def cluster_matrix(self, distance_matrix) -> np.ndarray:
        """Cluster from a square distance matrix (rows give n)."""
        matrix = np.asarray(distance_matrix, dtype=float)
        return self.cluster(matrix.shape[0], lambda i, j: matrix[i, j])

    def cluster_items(self, items: Sequence[T], distance: Callable[[T, T], float]) -> np.ndarray:
        """Cluster an ordered collection with a distance between items."""
        return self.cluster(len(items), lambda i, j: distance(items[i], items[j]))

    def get_metrics(self, distance_matrix: np.ndarray, labels: Optional[np.ndarray] = None,
                    X: Optional[np.ndarray] = None) -> Dict:
        """
        Calculate clustering metrics.

        Args:
            distance_matrix: Square distance matrix the labels were built from
            labels: Exemplar labels (uses self.labels_ if None)
            X: Optional feature array for feature-space metrics

        Returns:
            Dict of metrics
        """
        if labels is None:
            labels = self.labels_
        return calculate_cluster_metrics(distance_matrix, labels, X=X)

    def get_params_string(self) -> str:
        """Get parameters as formatted string for display."""
        return ", ".join(f"{k}={v}" for k, v in self.get_params().items())

    @classmethod
    def get_info(cls) -> Dict[str, str]:
        """Get model info for display."""
        return {
            'name': cls.name,
            'description': cls.description,
            'supports_n_clusters': cls.supports_n_clusters
        }
