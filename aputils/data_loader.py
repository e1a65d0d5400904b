"""Data loading utilities for the Exemplar Workbench."""

import pandas as pd
import tempfile
import os
import streamlit as st


# Three well-separated groups: {0, 1, 2}, {3, 4}, {5, 6}
SAMPLE_POINTS = [
    (0.0, 0.0),
    (0.0, 1.0),
    (1.0, 0.0),
    (5.0, 0.0),
    (5.0, 7.1),
    (100.0, 0.0),
    (100.0, 5.0),
]


def load_sample_points():
    """Small 2D demo set with columns x and y."""
    return pd.DataFrame(SAMPLE_POINTS, columns=['x', 'y'])


def load_file(uploaded_file):
    """
    Load CSV or SAV files.

    Args:
        uploaded_file: Streamlit uploaded file object

    Returns:
        tuple: (DataFrame, metadata) - metadata is None for CSV files
    """
    if uploaded_file is None:
        return None, None

    name = uploaded_file.name

    if name.endswith('.csv'):
        df = pd.read_csv(uploaded_file)
        return df, None

    elif name.endswith('.sav'):
        try:
            import pyreadstat
        except ImportError:
            st.error(
                "Please install pyreadstat to open .sav files: `pip install pyreadstat`")
            return None, None

        with tempfile.NamedTemporaryFile(delete=False, suffix=".sav") as tmp:
            tmp.write(uploaded_file.getvalue())
            tmp_path = tmp.name
        try:
            df, meta = pyreadstat.read_sav(tmp_path)
        finally:
            os.remove(tmp_path)
        return df, meta
    else:
        st.error("Unsupported file format. Please upload CSV or SAV files.")
        return None, None


def download_df(df):
    """
    Convert DataFrame to CSV bytes for download.

    Args:
        df: pandas DataFrame

    Returns:
        bytes: CSV encoded as UTF-8
    """
    return df.to_csv(index=False).encode('utf-8')
