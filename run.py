"""
Exemplar Workbench - Affinity Propagation Clustering
Main Streamlit Application

Cluster tabular data by pairwise distances with affinity propagation,
sweep preference policies, and compare the resulting exemplar sets.
"""

import logging

import streamlit as st
import pandas as pd
import numpy as np
import plotly.express as px

# Local imports
from aputils import load_file, download_df, load_sample_points, preprocess_features
from aputils.metrics import format_metrics_for_display
from apmodels import MODEL_NAMES, get_model, ModelRunner, PreferenceChoice

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# =============================================================================
# PAGE CONFIG
# =============================================================================
st.set_page_config(
    page_title="Exemplar Workbench | Affinity Propagation",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded"
)

# =============================================================================
# SESSION STATE INITIALIZATION
# =============================================================================
for key in ('data', 'meta', 'experiment_results', 'experiment_results_df',
            'current_labels', 'current_exemplars'):
    if key not in st.session_state:
        st.session_state[key] = None

# =============================================================================
# SIDEBAR - NAVIGATION & FILE UPLOAD
# =============================================================================
st.sidebar.title("🧭 Exemplar Workbench")
st.sidebar.caption("Affinity Propagation over pairwise distances")
st.sidebar.divider()

uploaded_file = st.sidebar.file_uploader(
    "Upload Data",
    type=['csv', 'sav'],
    help="Supported formats: CSV, SAV (.sav)"
)

if uploaded_file:
    df, meta = load_file(uploaded_file)
    if df is not None:
        st.session_state.data = df
        st.session_state.meta = meta

if st.sidebar.button("Use sample points", use_container_width=True):
    st.session_state.data = load_sample_points()
    st.session_state.meta = None

if st.session_state.data is not None:
    st.sidebar.divider()
    page = st.sidebar.radio(
        "Pages",
        ["Data View", "Single Run", "Preference Sweep", "Results Comparison", "Visualization"],
        label_visibility="collapsed"
    )
else:
    page = None

# =============================================================================
# MAIN CONTENT
# =============================================================================

if st.session_state.data is None:
    st.markdown("""
    # Welcome to the Exemplar Workbench

    Affinity propagation picks representative rows ("exemplars") from your data
    and assigns every other row to its closest exemplar. No cluster count is needed:
    the **preference** policy decides how many exemplars emerge.

    ### Getting Started
    👈 Upload a CSV or SAV file, or load the sample points, using the sidebar.
    """)
    st.stop()

df = st.session_state.data.copy()

if page == "Data View":
    st.title("Data Editor")
    st.caption(f"{len(df)} rows × {len(df.columns)} columns")

    edited_df = st.data_editor(df, num_rows="dynamic", use_container_width=True, height=500)
    if not df.equals(edited_df):
        st.session_state.data = edited_df
        st.success("Data updated!")

    st.download_button("📥 Download CSV", download_df(edited_df), "data.csv", "text/csv")
    st.stop()

# -----------------------------------------------------------------------------
# Feature selection and distances (shared across clustering pages)
# -----------------------------------------------------------------------------
st.sidebar.divider()
st.sidebar.subheader("Distances")

likely_ids = [c for c in df.columns if df[c].nunique() == len(df) and df[c].dtype == 'object']
default_features = [c for c in df.columns if c not in likely_ids]

features = st.sidebar.multiselect("Features", df.columns.tolist(), default=default_features)
metric = st.sidebar.selectbox("Metric", ["euclidean", "cityblock", "cosine", "chebyshev"])
scale = st.sidebar.checkbox("Standardize features", value=False)

if not features:
    st.warning("Please select at least one feature for clustering.")
    st.stop()

try:
    prep = preprocess_features(df, features, scale=scale, metric=metric)
except Exception as e:
    st.error(f"Preprocessing error: {e}")
    st.stop()

X = prep['X']
distance_matrix = prep['distance_matrix']


def render_param_inputs(model):
    """Render widgets for a model's parameter config and collect values."""
    params = {}
    for param_config in model.get_param_config():
        name = param_config['name']
        ptype = param_config['type']
        label = param_config.get('description', name)

        if ptype == 'int':
            params[name] = st.number_input(
                label, param_config['min'], param_config['max'], param_config['default'], step=1
            )
        elif ptype == 'float':
            params[name] = st.number_input(
                label, param_config['min'], param_config['max'], param_config['default'],
                step=param_config.get('step', 0.1)
            )
        elif ptype == 'select':
            params[name] = st.selectbox(
                label, param_config['options'],
                index=param_config['options'].index(param_config['default'])
            )
        elif ptype == 'bool':
            params[name] = st.checkbox(label, value=param_config['default'])
    return params


if page == "Single Run":
    st.title("Single Run")

    col1, col2 = st.columns([1, 3])

    with col1:
        model_key = st.selectbox("Algorithm", list(MODEL_NAMES.keys()), format_func=lambda x: MODEL_NAMES[x])
        model = get_model(model_key)
        st.caption(model.description)
        st.divider()
        params = render_param_inputs(model)
        run_btn = st.button("🚀 Run Clustering", type="primary", use_container_width=True)

    with col2:
        if run_btn:
            progress_bar = st.progress(0)
            try:
                model.set_params(**params)
            except ValueError as e:
                st.error(str(e))
                st.stop()
            model.progress_callback = lambda current, total: progress_bar.progress(current / total)

            with st.spinner("Passing messages..."):
                labels = model.cluster_matrix(distance_matrix)
                metrics = model.get_metrics(distance_matrix, labels, X=X)
            progress_bar.empty()

            st.session_state.current_labels = labels
            st.session_state.current_exemplars = model.get_exemplars()

            shown = format_metrics_for_display(metrics)
            m1, m2, m3 = st.columns(3)
            m1.metric("Exemplars", len(model.get_exemplars()))
            m2.metric("Silhouette", shown['Silhouette Score'])
            m3.metric("Total Distance", shown['Total Distance to Exemplars'])
            st.caption(f"Preference used: {model.preference_:.4f}")

            if len(model.get_exemplars()) == 0:
                st.warning("No exemplars emerged; every row was given the default label 0. "
                           "Try a higher preference or more iterations.")
            elif not metrics['valid']:
                st.warning("Clustering produced a single group or one group per row.")

            results_df = df.copy()
            results_df['Exemplar'] = labels
            st.subheader("Clustered Data")
            st.dataframe(results_df, use_container_width=True, height=300)
            st.download_button("📥 Download Results", download_df(results_df),
                               "clustered_data.csv", "text/csv")

            st.subheader("Exemplar Rows")
            st.dataframe(df.iloc[model.get_exemplars()], use_container_width=True)

elif page == "Preference Sweep":
    st.title("Preference Sweep")
    st.caption("Run affinity propagation across preference policies and damping factors")

    col1, col2 = st.columns([1, 2])

    with col1:
        selected_models = st.multiselect(
            "Models to Run", list(MODEL_NAMES.keys()),
            default=['affinity_propagation'], format_func=lambda x: MODEL_NAMES[x]
        )
        preferences = st.multiselect(
            "Preference Policies",
            [c.value for c in PreferenceChoice if c != PreferenceChoice.CONSTANT],
            default=['min', 'median', 'average', 'max']
        )
        damping_values = st.multiselect(
            "Damping Factors", [0.5, 0.6, 0.7, 0.8, 0.9, 0.95], default=[0.5, 0.9]
        )
        max_iterations = st.number_input("Iterations per run", 10, 2000, 200, step=10)
        run_batch = st.button("🚀 Run All Experiments", type="primary", use_container_width=True)

    with col2:
        if run_batch and selected_models and preferences and damping_values:
            progress_bar = st.progress(0)
            runner = ModelRunner()
            runner.run_preference_sweep(
                distance_matrix,
                preferences=preferences,
                damping_values=damping_values,
                max_iterations=int(max_iterations),
                models=selected_models,
                progress_callback=lambda current, total: progress_bar.progress(current / total),
                X=X
            )
            progress_bar.empty()

            results_df = runner.get_results_dataframe()
            st.session_state.experiment_results = runner
            st.session_state.experiment_results_df = results_df

            st.success(f"Completed {len(results_df)} experiments!")
            valid_count = results_df['Valid'].sum() if 'Valid' in results_df.columns else len(results_df)
            st.metric("Valid Results", f"{valid_count}/{len(results_df)}")

            st.subheader("Top 5 Results (by Silhouette)")
            top5 = pd.DataFrame([r.to_dict() for r in runner.get_top_n_results(5)])
            st.dataframe(top5, use_container_width=True, hide_index=True)

        elif st.session_state.experiment_results:
            st.info("Previous experiment results available. Go to 'Results Comparison' to view.")

elif page == "Results Comparison":
    st.title("Results Comparison")

    results_df = st.session_state.experiment_results_df
    if results_df is None or results_df.empty:
        st.warning("No experiment results yet. Run a preference sweep first.")
        st.stop()

    col1, col2 = st.columns(2)
    with col1:
        filter_valid = st.checkbox("Valid Only", value=True)
    with col2:
        sort_by = st.selectbox("Sort By", ["Silhouette", "Total Distance", "Exemplars"])

    filtered_df = results_df[results_df['Valid']] if filter_valid else results_df
    filtered_df = filtered_df.sort_values(sort_by, ascending=sort_by == "Total Distance")

    st.dataframe(filtered_df, use_container_width=True, height=400)
    st.download_button("📥 Download All Results", download_df(filtered_df),
                       "experiment_results.csv", "text/csv")

    if len(filtered_df) > 0:
        fig = px.scatter(
            filtered_df, x='Exemplars', y='Silhouette', color='Preference',
            symbol='Model', hover_data=['Parameters'],
            title="Silhouette vs Number of Exemplars"
        )
        st.plotly_chart(fig, use_container_width=True)

elif page == "Visualization":
    st.title("Cluster Visualization")

    has_single = st.session_state.current_labels is not None
    has_batch = st.session_state.experiment_results is not None
    if not has_single and not has_batch:
        st.warning("No clustering results yet. Run a model first.")
        st.stop()

    options = []
    if has_single:
        options.append("Last Single Run")
    if has_batch:
        options.append("Best from Sweep")
    source = st.radio("Visualize", options, horizontal=True)

    if source == "Last Single Run":
        labels = st.session_state.current_labels
        exemplars = st.session_state.current_exemplars
    else:
        best = st.session_state.experiment_results.get_best_result('silhouette')
        if best is None:
            st.warning("No valid results found.")
            st.stop()
        labels, exemplars = best.labels, best.exemplars
        st.info(f"Showing: {best.model_name} ({best.params_string})")

    if X.shape[1] >= 2:
        coords = X[:, :2]
        axis_names = features[:2]
    else:
        coords = np.column_stack([X[:, 0], np.zeros(len(X))])
        axis_names = [features[0], 'zero']

    plot_df = pd.DataFrame(coords, columns=axis_names)
    plot_df['Exemplar'] = labels.astype(str)
    plot_df['Is Exemplar'] = np.isin(np.arange(len(labels)), exemplars)

    fig = px.scatter(
        plot_df, x=axis_names[0], y=axis_names[1], color='Exemplar', symbol='Is Exemplar',
        title="Items coloured by exemplar", color_discrete_sequence=px.colors.qualitative.Set2
    )
    fig.update_traces(marker=dict(size=10))
    fig.update_layout(height=550)
    st.plotly_chart(fig, use_container_width=True)

# =============================================================================
# FOOTER
# =============================================================================
st.sidebar.divider()
st.sidebar.caption("Exemplar Workbench v1.0")
