import streamlit as st

# Import our custom modules
import calc
import config
import info
import ui
from logging_config import setup_logging

logger = setup_logging(config.LOG_LEVEL, config.LOG_FILE)

# Set page config
st.set_page_config(page_title="Model Memory Calculator", layout="wide")

theme_mode = ui.init_theme()
ui.apply_theme(theme_mode)

# Add title and description
st.title("Model Memory Calculator")
st.markdown("""
Use the Model Memory Calculator to estimate the memory footprint of your model
and the maximum batch size / sequence length combination you can run on your device.
""")

# Generate the UI components and get user inputs
model_config = ui.create_sidebar_inputs()

if not calc.inputs_ready(model_config):
    st.info("Select or enter a model and a device in the sidebar to see the estimates.")
    st.stop()

model = ui.model_from_config(model_config)
device_memory = model_config["device_memory"]
prefill_chunking = model_config["prefill_chunking"]

logger.info(
    "Estimating %s on %s (%g GB), prefill chunking: %s",
    model.name, model_config["device_name"], device_memory, prefill_chunking,
)

# Calculate requirements based on user inputs
breakdown_df = calc.footprint_breakdown(device_memory, model, prefill_chunking)
frontier_df = calc.frontier_by_precision(device_memory, model, prefill_chunking)
memory_per_token = calc.calculate_memory_per_token(model.hidden_size, model.num_layers)
activation_memory = (
    calc.calculate_activation_memory(model.hidden_size, model.intermediate_size)
    if prefill_chunking else 0
)

ui.display_model_specifications(model_config, memory_per_token, activation_memory)
ui.display_footprint(breakdown_df, prefill_chunking, theme_mode)
ui.display_frontier(frontier_df, prefill_chunking, theme_mode)

# Display reference information
st.markdown("---")
st.markdown(info.get_reference_information())
