"""
Module: tests/test_runner.py
Description: Test batch experiments and result ranking
Test: pytest tests/test_runner.py
"""

import numpy as np
import pandas as pd
import pytest

from apmodels import ExperimentResult, ModelRunner, create_experiment_configs


def blob_distances():
    points = np.array([
        [0.0, 0.0], [0.0, 0.5], [0.5, 0.0],
        [10.0, 10.0], [10.0, 10.5], [10.5, 10.0],
    ])
    return np.linalg.norm(points[:, None, :] - points[None, :, :], axis=-1)


def make_result(name, silhouette, total_distance, valid=True):
    return ExperimentResult(
        model_name=name,
        params={'preference': 'median', 'damping_factor': 0.9},
        labels=np.array([0, 0, 2]),
        exemplars=np.array([0, 2]),
        metrics={'silhouette': silhouette, 'total_distance': total_distance,
                 'n_clusters': 2, 'valid': valid},
        runtime=0.01
    )


class TestModelRunner:
    """Test ModelRunner."""

    def test_run_single(self):
        runner = ModelRunner()

        result = runner.run_single('affinity_propagation', blob_distances(), {'preference': 'max'})

        assert result.model_name == "Affinity Propagation"
        assert result.labels.tolist() == list(range(6))
        assert result.params['preference'] == 'max'
        assert result.metrics['n_clusters'] == 6
        assert result.runtime >= 0

    def test_run_single_unknown_model(self):
        with pytest.raises(ValueError, match="Unknown model"):
            ModelRunner().run_single('kmeans', blob_distances())

    def test_run_batch_records_failures(self):
        runner = ModelRunner()
        configs = [
            {'model': 'affinity_propagation', 'preference': 'max'},
            {'model': 'affinity_propagation', 'preference': 'bogus'},
        ]

        results = runner.run_batch(blob_distances(), configs)

        assert len(results) == 2
        assert results[1].metrics['valid'] is False
        assert 'bogus' in results[1].metrics['error']
        # Caller configs are left intact
        assert configs[0]['model'] == 'affinity_propagation'

    def test_run_batch_reports_progress(self):
        progress = []
        configs = [{'model': 'affinity_propagation', 'preference': p} for p in ('min', 'max')]

        ModelRunner().run_batch(blob_distances(), configs, lambda current, total: progress.append((current, total)))

        assert progress == [(1, 2), (2, 2)]

    def test_preference_sweep(self):
        runner = ModelRunner()

        results = runner.run_preference_sweep(
            blob_distances(), preferences=['min', 'max'], damping_values=[0.5, 0.9], max_iterations=50
        )

        assert len(results) == 4
        assert {r.params['preference'] for r in results} == {'min', 'max'}

    def test_results_dataframe(self):
        runner = ModelRunner()
        assert runner.get_results_dataframe().empty

        runner.results = [make_result('a', 0.2, 5.0), make_result('b', 0.8, 9.0)]
        df = runner.get_results_dataframe()

        assert isinstance(df, pd.DataFrame)
        assert df['Model'].tolist() == ['b', 'a']
        assert {'Exemplars', 'Silhouette', 'Total Distance', 'Valid'} <= set(df.columns)

    def test_best_and_top_results(self):
        runner = ModelRunner()
        runner.results = [
            make_result('a', 0.2, 5.0),
            make_result('b', 0.8, 9.0),
            make_result('c', 0.5, 1.0),
            make_result('d', 0.99, 0.5, valid=False),
        ]

        assert runner.get_best_result('silhouette').model_name == 'b'
        assert runner.get_best_result('total_distance').model_name == 'c'
        assert [r.model_name for r in runner.get_top_n_results(5)] == ['b', 'c', 'a']

    def test_best_result_empty(self):
        assert ModelRunner().get_best_result() is None

    def test_unknown_metric(self):
        with pytest.raises(ValueError, match="Unknown metric"):
            ModelRunner().get_top_n_results(metric='accuracy')

    def test_clear_results(self):
        runner = ModelRunner()
        runner.results = [make_result('a', 0.2, 5.0)]

        runner.clear_results()

        assert runner.results == []

    def test_available_models(self):
        models = ModelRunner().get_available_models()

        assert set(models) == {'affinity_propagation', 'sklearn_affinity_propagation'}


class TestCreateExperimentConfigs:
    """Test experiment grid expansion."""

    def test_grid(self):
        configs = create_experiment_configs(['affinity_propagation'], ['min', 'median'], [0.5, 0.9], 100)

        assert len(configs) == 4
        assert configs[0] == {
            'model': 'affinity_propagation',
            'preference': 'min',
            'damping_factor': 0.5,
            'max_iterations': 100
        }

    def test_skips_low_damping_for_sklearn(self):
        configs = create_experiment_configs(['sklearn_affinity_propagation'], ['median'], [0.3, 0.9])

        assert [c['damping_factor'] for c in configs] == [0.9]
