"""Data preprocessing utilities for distance-based clustering."""

import pandas as pd
import numpy as np
from scipy.spatial.distance import pdist, squareform
from sklearn.preprocessing import StandardScaler, LabelEncoder


def encode_categorical(df):
    """
    Encode categorical columns using LabelEncoder.

    Args:
        df: pandas DataFrame

    Returns:
        DataFrame with categorical columns encoded as integers
    """
    df_encoded = df.copy()
    encoders = {}

    for col in df_encoded.columns:
        series = df_encoded[col]
        if pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series) \
                or isinstance(series.dtype, pd.CategoricalDtype):
            le = LabelEncoder()
            df_encoded[col] = le.fit_transform(df_encoded[col].astype(str))
            encoders[col] = le

    return df_encoded, encoders


def scale_features(df):
    """
    Standardize features using StandardScaler.

    Args:
        df: pandas DataFrame with numeric columns

    Returns:
        tuple: (scaled_array, scaler) - numpy array and fitted scaler
    """
    scaler = StandardScaler()
    scaled = scaler.fit_transform(df)
    return scaled, scaler


def build_distance_matrix(X, metric='euclidean'):
    """
    Square pairwise distance matrix between the rows of X.

    Args:
        X: Feature array (n_samples, n_features)
        metric: Any metric accepted by scipy.spatial.distance.pdist

    Returns:
        numpy array of shape (n_samples, n_samples) with a zero diagonal
    """
    X = np.asarray(X, dtype=float)
    if len(X) < 2:
        return np.zeros((len(X), len(X)))
    return squareform(pdist(X, metric=metric))


def preprocess_features(df, features, scale=True, metric='euclidean'):
    """
    Complete preprocessing pipeline: select, encode, optionally scale, then
    compute pairwise distances.

    Args:
        df: pandas DataFrame
        features: list of column names to use
        scale: Standardize features before measuring distances
        metric: Distance metric for build_distance_matrix

    Returns:
        dict with keys:
            - 'X_raw': original feature DataFrame
            - 'X_encoded': encoded DataFrame
            - 'X': feature array the distances were computed on
            - 'distance_matrix': square numpy array
            - 'scaler': fitted StandardScaler (None when scale=False)
            - 'encoders': dict of LabelEncoders
            - 'feature_names': list of feature names
    """
    X_raw = df[features].copy()

    # Handle missing values with median/mode imputation
    for col in X_raw.columns:
        if X_raw[col].isnull().any():
            if pd.api.types.is_numeric_dtype(X_raw[col]):
                X_raw[col] = X_raw[col].fillna(X_raw[col].median())
            else:
                mode = X_raw[col].mode()
                X_raw[col] = X_raw[col].fillna(mode.iloc[0] if len(mode) > 0 else 'Unknown')

    X_encoded, encoders = encode_categorical(X_raw)
    if scale:
        X, scaler = scale_features(X_encoded)
    else:
        X, scaler = X_encoded.to_numpy(dtype=float), None

    return {
        'X_raw': X_raw,
        'X_encoded': X_encoded,
        'X': X,
        'distance_matrix': build_distance_matrix(X, metric=metric),
        'scaler': scaler,
        'encoders': encoders,
        'feature_names': features
    }
