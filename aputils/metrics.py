"""Clustering evaluation metrics."""

import numpy as np
from sklearn.metrics import (
    silhouette_score,
    davies_bouldin_score,
    calinski_harabasz_score
)


def calculate_cluster_metrics(distance_matrix, labels, X=None):
    """
    Calculate clustering evaluation metrics for exemplar labels.

    Args:
        distance_matrix: Square distance matrix between items
        labels: Exemplar index per item
        X: Optional feature array (enables feature-space metrics)

    Returns:
        dict with metrics:
            - silhouette: Silhouette Score on the precomputed distances
              (-1 to 1, higher is better)
            - total_distance: Sum of each item's distance to its exemplar
              (lower is better)
            - davies_bouldin: Davies-Bouldin Index, only with X (lower is better)
            - calinski_harabasz: Calinski-Harabasz Index, only with X (higher is better)
            - n_clusters: Number of distinct exemplars in use
            - valid: Whether the clustering has 2..n-1 clusters
    """
    labels = np.asarray(labels)
    D = np.array(distance_matrix, dtype=float)
    n_samples = len(labels)
    n_clusters = len(np.unique(labels))
    total_distance = float(D[np.arange(n_samples), labels].sum()) if n_samples else 0.0

    # Silhouette needs at least 2 clusters and fewer clusters than items
    if n_clusters < 2 or n_clusters >= n_samples:
        return {
            'silhouette': 0.0,
            'total_distance': round(total_distance, 4),
            'davies_bouldin': float('inf'),
            'calinski_harabasz': 0.0,
            'n_clusters': n_clusters,
            'valid': False
        }

    np.fill_diagonal(D, 0)

    try:
        sil = silhouette_score(D, labels, metric='precomputed')
    except Exception:
        sil = 0.0

    db = float('inf')
    ch = 0.0
    if X is not None:
        try:
            db = davies_bouldin_score(X, labels)
        except Exception:
            db = float('inf')

        try:
            ch = calinski_harabasz_score(X, labels)
        except Exception:
            ch = 0.0

    return {
        'silhouette': round(float(sil), 4),
        'total_distance': round(total_distance, 4),
        'davies_bouldin': round(float(db), 4),
        'calinski_harabasz': round(float(ch), 4),
        'n_clusters': n_clusters,
        'valid': True
    }


def format_metrics_for_display(metrics):
    """
    Format metrics dictionary for display in Streamlit.

    Args:
        metrics: dict from calculate_cluster_metrics

    Returns:
        dict with formatted strings
    """
    return {
        'Silhouette Score': f"{metrics['silhouette']:.4f}",
        'Total Distance to Exemplars': f"{metrics['total_distance']:.4f}",
        'Davies-Bouldin Index': f"{metrics['davies_bouldin']:.4f}",
        'Calinski-Harabasz Index': f"{metrics['calinski_harabasz']:.2f}",
        'Exemplars Found': metrics['n_clusters']
    }
