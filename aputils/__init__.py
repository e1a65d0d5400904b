"""Utility modules for the Exemplar Workbench."""

from .data_loader import load_file, download_df, load_sample_points
from .preprocessing import preprocess_features, encode_categorical, scale_features, build_distance_matrix
from .metrics import calculate_cluster_metrics, format_metrics_for_display
from .priority_queue import PriorityQueue

__all__ = [
    'load_file',
    'download_df',
    'load_sample_points',
    'preprocess_features',
    'encode_categorical',
    'scale_features',
    'build_distance_matrix',
    'calculate_cluster_metrics',
    'format_metrics_for_display',
    'PriorityQueue',
]
