import streamlit as st
import pandas as pd
import plotly.graph_objects as go

import config
import presets
from presets import ModelSpec, Precision

MODE_STANDARD = "Standard Calculator"
MODE_PREFILL = "Calculator with Prefill Chunking"

DARK_CSS = """
<style>
.stApp { background-color: #181f26; color: #f9fafb; }
[data-testid="stSidebar"] { background-color: #222b35; }
[data-testid="stSidebar"] * { color: #f9fafb; }
</style>
"""


def init_theme():
    """Initialize theme state and return current theme mode."""
    if "theme_mode" not in st.session_state:
        st.session_state["theme_mode"] = config.DEFAULT_THEME
    return st.session_state["theme_mode"]


def toggle_theme():
    """Toggle between dark and light theme."""
    st.session_state["theme_mode"] = "light" if st.session_state["theme_mode"] == "dark" else "dark"


def apply_theme(theme_mode):
    if theme_mode == "dark":
        st.markdown(DARK_CSS, unsafe_allow_html=True)


def get_plotly_layout(theme_mode):
    """Shared Plotly layout settings for the current theme."""
    text_color = config.THEME_TEXT_COLORS.get(theme_mode, config.THEME_TEXT_COLORS["light"])
    return dict(
        template="plotly_dark" if theme_mode == "dark" else "plotly_white",
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=text_color),
    )


def create_sidebar_inputs():
    """Create sidebar inputs and return the configuration as a dictionary."""
    st.sidebar.button(
        "Toggle Dark Mode",
        key="theme_toggle",
        on_click=toggle_theme,
    )

    st.sidebar.header("Calculator")
    mode = st.sidebar.radio(
        "Calculator Mode",
        options=[MODE_STANDARD, MODE_PREFILL],
        index=0,
        key="calculator_mode",
        help="Prefill chunking processes long prompts in fixed-size chunks, adding a bounded activation overhead",
    )
    prefill_chunking = mode == MODE_PREFILL

    # Model selection - offering both presets and custom architecture
    st.sidebar.markdown("---")
    st.sidebar.subheader("Model")
    model_input_method = st.sidebar.radio(
        "Model Input Method",
        options=["Model Selection", "Custom Model"],
        index=0,
        key="model_input_method",
    )

    model_name = None
    params = hidden_size = num_layers = intermediate_size = None

    if model_input_method == "Model Selection":
        model_name = st.sidebar.selectbox(
            "Select a Model",
            options=list(presets.get_known_models()),
            index=None,
            placeholder="None selected",
            key="model_name",
        )
        if model_name is not None:
            model = presets.get_model(model_name)
            params = model.params
            hidden_size = model.hidden_size
            num_layers = model.num_layers
            intermediate_size = model.intermediate_size
    else:
        params = st.sidebar.number_input(
            "Model Parameters (Billions)",
            min_value=0.0,
            value=None,
            step=1.0,
            placeholder="e.g. 7 (for LLaMA-7B)",
            key="custom_params",
        )
        hidden_size = st.sidebar.number_input(
            "Hidden Size",
            min_value=1,
            value=None,
            step=1,
            placeholder="e.g. 4096 (for LLaMA-7B)",
            key="custom_hidden_size",
        )
        num_layers = st.sidebar.number_input(
            "Number of Layers",
            min_value=1,
            value=None,
            step=1,
            placeholder="e.g. 32 (for LLaMA-7B)",
            key="custom_num_layers",
        )
        if prefill_chunking:
            intermediate_size = st.sidebar.number_input(
                "Intermediate Size",
                min_value=1,
                value=None,
                step=1,
                placeholder="e.g. 11008 (for LLaMA-7B)",
                key="custom_intermediate_size",
            )

    # Device selection
    st.sidebar.markdown("---")
    st.sidebar.subheader("Device")
    device_input_method = st.sidebar.radio(
        "Device Input Method",
        options=["Device Selection", "Custom Device"],
        index=0,
        key="device_input_method",
    )

    device_name = None
    if device_input_method == "Device Selection":
        device_name = st.sidebar.selectbox(
            "Select a Device",
            options=list(presets.get_device_options()),
            index=None,
            placeholder="None selected",
            key="device_name",
        )
        device_memory = presets.get_device(device_name).memory if device_name is not None else None
    else:
        device_memory = st.sidebar.number_input(
            "Device RAM (GB)",
            min_value=0.0,
            value=None,
            step=1.0,
            placeholder="e.g. 24",
            key="custom_device_memory",
        )

    return {
        "prefill_chunking": prefill_chunking,
        "model_name": model_name or "Custom Model",
        "params": params,
        "hidden_size": hidden_size,
        "num_layers": num_layers,
        "intermediate_size": intermediate_size,
        "device_name": device_name or "Custom Device",
        "device_memory": device_memory,
    }


def model_from_config(model_config):
    """Build the ModelSpec described by the sidebar configuration."""
    return ModelSpec(
        name=model_config["model_name"],
        params=model_config["params"],
        hidden_size=int(model_config["hidden_size"]),
        intermediate_size=int(model_config["intermediate_size"] or 0),
        num_layers=int(model_config["num_layers"]),
    )


def build_footprint_chart(breakdown_df, theme_mode="light"):
    """
    Horizontal stacked bar per precision: model memory, activation overhead
    and the remaining device capacity. Rows over capacity are drawn as a
    dashed outline labelled "Out of Memory".
    """
    text_color = config.THEME_TEXT_COLORS.get(theme_mode, config.THEME_TEXT_COLORS["light"])
    labels = breakdown_df["Precision"].tolist()
    colors = [config.PRECISION_COLORS[label] for label in labels]
    fits = ~breakdown_df["Out of Memory"]
    device_memory = float(breakdown_df["Device Memory (GB)"].iloc[0])

    fig = go.Figure()
    fig.add_trace(go.Bar(
        y=labels,
        x=breakdown_df["Model Memory (GB)"].where(fits, 0),
        orientation="h",
        name="Model Memory",
        marker=dict(color=colors),
        hovertemplate="Model memory: %{x:.2f} GB<extra>%{y}</extra>",
    ))

    if (breakdown_df["Overhead (GB)"] > 0).any():
        fig.add_trace(go.Bar(
            y=labels,
            x=breakdown_df["Overhead (GB)"].where(fits, 0),
            orientation="h",
            name="Activation Overhead",
            marker=dict(color=config.ACTIVATION_COLOR),
            hovertemplate="Activation overhead: %{x:.2f} GB<extra>%{y}</extra>",
        ))

    fig.add_trace(go.Bar(
        y=labels,
        x=breakdown_df["Remaining (GB)"],
        orientation="h",
        name="Remaining Capacity",
        marker=dict(color="rgba(0,0,0,0)", line=dict(color=colors, width=2)),
        hovertemplate="Remaining: %{x:.2f} GB<extra>%{y}</extra>",
    ))

    for index, row in breakdown_df.reset_index(drop=True).iterrows():
        if not row["Out of Memory"]:
            continue
        fig.add_shape(
            type="rect",
            xref="x", yref="y",
            x0=0, x1=device_memory,
            y0=index - 0.4, y1=index + 0.4,
            line=dict(color=text_color, width=2, dash="dash"),
        )
        fig.add_annotation(
            x=device_memory / 2,
            y=row["Precision"],
            text="Out of Memory",
            showarrow=False,
            font=dict(color=text_color, size=14),
        )

    fig.update_layout(
        barmode="stack",
        title=f"Model Footprint on {device_memory:g} GB",
        xaxis=dict(title="Memory (GB)", range=[0, device_memory]),
        yaxis=dict(autorange="reversed", type="category"),
        legend=dict(orientation="h", yanchor="bottom", y=-0.35),
        height=320,
        **get_plotly_layout(theme_mode),
    )
    return fig


def build_frontier_chart(frontier_df, theme_mode="light"):
    """Line chart of the batch size / sequence length frontier per precision."""
    fig = go.Figure()

    for precision in Precision:
        curve = frontier_df[frontier_df["Precision"] == precision.value]
        fig.add_trace(go.Scatter(
            x=curve["Sequence Length"],
            y=curve["Batch Size"],
            mode="lines",
            name=precision.value,
            line=dict(color=precision.color, width=4, shape="spline"),
            hovertemplate="Sequence Length: %{x:.0f}<br>Batch Size: %{y:.0f}<extra>%{fullData.name}</extra>",
        ))

    fig.update_layout(
        xaxis=dict(title="Sequence Length", range=[0, config.MAX_SEQ_LENGTH]),
        yaxis=dict(title="Batch Size", range=[0, config.MAX_BATCH_SIZE]),
        legend=dict(title="Precision", bordercolor=config.THEME_TEXT_COLORS.get(theme_mode, "#181f26"),
                    borderwidth=1),
        dragmode="pan",
        hovermode="closest",
        height=450,
        **get_plotly_layout(theme_mode),
    )
    return fig


def footprint_table(breakdown_df):
    """Per-precision usage as "<used> / <capacity> GB" with a fit status."""
    return pd.DataFrame({
        "Precision": breakdown_df["Precision"],
        "Memory": [
            f"{total:.2f} / {capacity:g} GB"
            for total, capacity in zip(breakdown_df["Total (GB)"], breakdown_df["Device Memory (GB)"])
        ],
        "Status": ["Out of Memory" if oom else "Fits" for oom in breakdown_df["Out of Memory"]],
    })


def display_model_specifications(model_config, memory_per_token, activation_memory):
    """Display the model and device being evaluated in a compact table."""
    specs = {
        "Model": model_config["model_name"],
        "Parameters": f"{model_config['params']:g} billion",
        "Hidden Size": str(int(model_config["hidden_size"])),
        "Number of Layers": str(int(model_config["num_layers"])),
        "Device": model_config["device_name"],
        "Device Memory": f"{model_config['device_memory']:g} GB",
        "Memory per Token": f"{memory_per_token * 1e3:.3f} MB",
    }
    if model_config["prefill_chunking"]:
        specs["Intermediate Size"] = str(int(model_config["intermediate_size"]))
        specs["Prefill Chunk Size"] = f"{config.PREFILL_CHUNK_SIZE} tokens"
        specs["Activation Overhead"] = f"{activation_memory:.3f} GB"

    specs_df = pd.DataFrame(list(specs.items()), columns=["Specification", "Value"])
    st.markdown("#### Model Specifications")
    st.dataframe(specs_df, hide_index=True)


def display_footprint(breakdown_df, prefill_chunking, theme_mode):
    """Create and display the model footprint bar chart and table."""
    title = "Model Footprint with Prefill Chunking" if prefill_chunking else "Model Footprint"
    st.subheader(title)

    col1, col2 = st.columns([3, 1])
    with col1:
        st.plotly_chart(build_footprint_chart(breakdown_df, theme_mode))
    with col2:
        st.dataframe(footprint_table(breakdown_df), hide_index=True)


def display_frontier(frontier_df, prefill_chunking, theme_mode):
    """Create and display the maximum batch size / sequence length chart."""
    title = "Maximum Batch Size / Sequence Length"
    if prefill_chunking:
        title += " with Prefill Chunking"
    st.subheader(title)

    if frontier_df.empty:
        st.warning("No batch size / sequence length combination fits on this device at any precision.")

    st.plotly_chart(build_frontier_chart(frontier_df, theme_mode), config={"scrollZoom": True})
