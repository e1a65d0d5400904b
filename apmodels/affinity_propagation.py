"""Affinity Propagation clustering model."""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from apmodels.base import BaseClusterModel, DistanceFunc
from apmodels.settings import APSettings, PreferenceChoice

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


# =============================================================================
# SIMILARITY & PREFERENCE
# =============================================================================

def compute_preference(values: np.ndarray, settings: APSettings) -> float:
    """
    Derive the shared self-similarity from all n*n similarity values.

    Args:
        values: Flat array of similarities, taken before the diagonal is set
        settings: Run settings selecting the policy

    Returns:
        Scalar preference
    """
    choice = settings.preference
    if choice == PreferenceChoice.CONSTANT:
        return float(settings.constant_preference)
    elif choice == PreferenceChoice.MIN:
        return float(np.min(values))
    elif choice == PreferenceChoice.MAX:
        return float(np.max(values))
    elif choice == PreferenceChoice.MEDIAN:
        return float(np.median(values))
    elif choice == PreferenceChoice.AVERAGE:
        return float(np.mean(values))
    else:
        raise ValueError(f"Unknown preference choice: {choice}")


def build_similarity(
    n: int,
    distance: DistanceFunc,
    settings: APSettings,
    rng: Optional[np.random.Generator] = None
) -> Tuple[np.ndarray, float]:
    """
    Build the negated similarity matrix and write the preference on its diagonal.

    Args:
        n: Number of items
        distance: Callable (i, j) -> distance, called for every ordered pair
        settings: Run settings
        rng: Noise generator, created from settings.random_seed if None

    Returns:
        tuple: (S, preference)
    """
    S = np.empty((n, n), dtype=float)
    for i in range(n):
        for j in range(n):
            S[i, j] = -distance(i, j)

    if settings.random_noise:
        if rng is None:
            rng = settings.make_rng()
        S -= rng.random((n, n)) * settings.noise_scale

    preference = compute_preference(S.ravel(), settings)
    np.fill_diagonal(S, preference)
    return S, preference


# =============================================================================
# MESSAGE PASSING
# =============================================================================

def update_responsibility(S: np.ndarray, R: np.ndarray, A: np.ndarray, damping: float) -> None:
    """
    Damped responsibility update, in place on R.

    Each item competes against the best other candidate: the row maximum of
    A + S everywhere except at the argmax itself, where the second maximum is
    used instead.
    """
    n = S.shape[0]
    rows = np.arange(n)

    AS = A + S
    max_idx = np.argmax(AS, axis=1)
    first_max = AS[rows, max_idx]
    AS[rows, max_idx] = -np.inf
    second_max = np.max(AS, axis=1)

    competing = np.repeat(first_max[:, np.newaxis], n, axis=1)
    competing[rows, max_idx] = second_max

    R[:] = damping * R + (1 - damping) * (S - competing)


def update_availability(R: np.ndarray, A: np.ndarray, damping: float) -> np.ndarray:
    """
    Damped availability update, in place on A.

    Returns:
        Column sums of the positive responsibilities used for this round
    """
    positive = np.maximum(R, 0)
    column_sums = positive.sum(axis=0)
    self_resp = np.diag(R).copy()
    self_positive = np.maximum(self_resp, 0)

    candidate = np.minimum(0, self_resp + column_sums - positive - self_positive)
    np.fill_diagonal(candidate, column_sums - self_positive)

    A[:] = damping * A + (1 - damping) * candidate
    return column_sums


def propagate_messages(
    S: np.ndarray,
    settings: APSettings,
    progress_callback: Optional[ProgressCallback] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Run exactly settings.max_iterations rounds of message passing.

    Args:
        S: Similarity matrix with the preference on its diagonal
        settings: Run settings
        progress_callback: Optional callback(current, total) after each round

    Returns:
        tuple: (R, A) after the final round
    """
    n = S.shape[0]
    R = np.zeros((n, n))
    A = np.zeros((n, n))
    damping = settings.damping_factor
    total = settings.max_iterations

    # A single item drives inf - inf into its own messages; NaN is expected there
    with np.errstate(invalid='ignore'):
        for iteration in range(total):
            update_responsibility(S, R, A, damping)
            update_availability(R, A, damping)
            if progress_callback:
                progress_callback(iteration + 1, total)

    return R, A


# =============================================================================
# EXEMPLARS & LABELS
# =============================================================================

def select_exemplars(R: np.ndarray, A: np.ndarray) -> np.ndarray:
    """Indices i with R[i, i] + A[i, i] > 0, ascending. May be empty."""
    return np.flatnonzero(np.diag(R) + np.diag(A) > 0)


def assign_labels(S: np.ndarray, exemplars: np.ndarray) -> np.ndarray:
    """
    Assign every item to the exemplar with the highest similarity.

    Ties go to the lowest exemplar index. With no exemplars every item gets
    the default label 0.
    """
    n = S.shape[0]
    labels = np.zeros(n, dtype=int)
    if len(exemplars) == 0:
        logger.warning("No exemplars found among %d items; all labels default to 0", n)
        return labels

    candidates = S[:, exemplars]
    best = np.argmax(candidates, axis=1)
    found = candidates[np.arange(n), best] > -np.inf
    labels[found] = exemplars[best[found]]
    return labels


# =============================================================================
# MODEL
# =============================================================================

class AffinityPropagationModel(BaseClusterModel):
    """
    Affinity Propagation.

    Finds "exemplars" (representative items) by passing responsibility and
    availability messages between pairs of items, using only a distance
    oracle. Does NOT require specifying the number of clusters: the
    preference policy controls how many exemplars emerge.

    The distance oracle is not required to be symmetric. An asymmetric one
    gives an asymmetric similarity matrix, which the updates handle as-is.
    """

    name = "Affinity Propagation"
    description = "Exemplar-based clustering that finds representative items from pairwise distances"
    supports_n_clusters = False  # Determined by preference/damping

    def __init__(
        self,
        settings: Optional[APSettings] = None,
        rng: Optional[np.random.Generator] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        super().__init__()
        self.settings = settings if settings is not None else APSettings()
        self.rng = rng
        self.progress_callback = progress_callback
        self.preference_ = None

    def get_param_config(self) -> List[Dict[str, Any]]:
        defaults = APSettings()
        return [
            {
                'name': 'max_iterations',
                'type': 'int',
                'default': defaults.max_iterations,
                'min': 10,
                'max': 2000,
                'description': 'Message-passing rounds'
            },
            {
                'name': 'damping_factor',
                'type': 'float',
                'default': defaults.damping_factor,
                'min': 0.0,
                'max': 0.99,
                'step': 0.01,
                'description': 'Damping factor to avoid numerical oscillations'
            },
            {
                'name': 'preference',
                'type': 'select',
                'default': defaults.preference.value,
                'options': [c.value for c in PreferenceChoice],
                'description': 'Preference policy (higher gives more exemplars)'
            },
            {
                'name': 'constant_preference',
                'type': 'float',
                'default': defaults.constant_preference,
                'min': -1000.0,
                'max': 0.0,
                'step': 0.5,
                'description': 'Preference value when policy is constant'
            },
            {
                'name': 'random_noise',
                'type': 'bool',
                'default': defaults.random_noise,
                'description': 'Add tiny noise to break ties between similarities'
            },
            {
                'name': 'random_seed',
                'type': 'int',
                'default': defaults.random_seed,
                'min': -1,
                'max': 10000,
                'description': 'Noise seed (-1 for a fresh seed every run)'
            }
        ]

    def set_params(self, **kwargs) -> None:
        known = {k: v for k, v in kwargs.items() if k in self.settings.to_params()}
        self.settings = self.settings.replace(**known)

    def get_params(self) -> Dict[str, Any]:
        return self.settings.to_params()

    def cluster(self, n: int, distance: DistanceFunc) -> np.ndarray:
        settings = self.settings
        logger.debug("Running affinity propagation on %d items (%s)", n, self.get_params_string())

        S, preference = build_similarity(n, distance, settings, self.rng)
        R, A = propagate_messages(S, settings, self.progress_callback)
        exemplars = select_exemplars(R, A)
        labels = assign_labels(S, exemplars)

        self.preference_ = preference
        self.exemplars_ = exemplars
        self.labels_ = labels
        logger.info("Affinity propagation found %d exemplars among %d items", len(exemplars), n)
        return labels

    def get_exemplars(self) -> np.ndarray:
        """Get indices of the exemplar items."""
        if self.exemplars_ is not None:
            return self.exemplars_
        return np.array([], dtype=int)
