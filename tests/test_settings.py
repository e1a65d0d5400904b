"""
Module: tests/test_settings.py
Description: Test run configuration and the model registry
Test: pytest tests/test_settings.py
"""

import dataclasses

import pytest

from apmodels import (
    APSettings,
    AffinityPropagationModel,
    MODEL_NAMES,
    MODEL_REGISTRY,
    PreferenceChoice,
    SklearnAffinityPropagationModel,
    get_model,
    list_models,
)


class TestAPSettings:
    """Test APSettings."""

    def test_defaults(self):
        settings = APSettings()

        assert settings.max_iterations == 100
        assert settings.damping_factor == 0.9
        assert settings.preference is PreferenceChoice.MEDIAN
        assert settings.constant_preference == -1
        assert settings.random_noise is False
        assert settings.noise_scale == 1e-8
        assert settings.random_seed == -1

    def test_preference_from_string(self):
        assert APSettings(preference='AVERAGE').preference is PreferenceChoice.AVERAGE
        assert APSettings(preference='constant').preference is PreferenceChoice.CONSTANT

    def test_invalid_preference(self):
        with pytest.raises(ValueError, match="Unknown preference choice"):
            APSettings(preference='mode')

    def test_immutable(self):
        settings = APSettings()

        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.damping_factor = 0.5

    def test_replace_returns_validated_copy(self):
        settings = APSettings()
        changed = settings.replace(preference='max', max_iterations=10)

        assert changed.preference is PreferenceChoice.MAX
        assert changed.max_iterations == 10
        assert settings.max_iterations == 100
        with pytest.raises(ValueError):
            settings.replace(preference='bogus')

    def test_damping_not_range_checked(self):
        assert APSettings(damping_factor=1.5).damping_factor == 1.5

    def test_to_params(self):
        params = APSettings(preference='min').to_params()

        assert params['preference'] == 'min'
        assert params['max_iterations'] == 100

    def test_seeded_rng_is_reproducible(self):
        settings = APSettings(random_seed=5)

        assert settings.make_rng().random() == settings.make_rng().random()


class TestRegistry:
    """Test model registry and factory."""

    def test_get_model(self):
        assert isinstance(get_model('affinity_propagation'), AffinityPropagationModel)
        assert isinstance(get_model('sklearn_affinity_propagation'), SklearnAffinityPropagationModel)

    def test_unknown_model(self):
        with pytest.raises(ValueError, match="Unknown model"):
            get_model('kmeans')

    def test_names_cover_registry(self):
        assert set(MODEL_NAMES) == set(MODEL_REGISTRY)
        assert list_models() == list(MODEL_REGISTRY)

    def test_model_info(self):
        info = AffinityPropagationModel.get_info()

        assert info['name'] == "Affinity Propagation"
        assert info['supports_n_clusters'] is False
