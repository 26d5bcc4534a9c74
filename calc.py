import numpy as np
import pandas as pd

import config
from logging_config import get_logger
from presets import Precision

logger = get_logger(__name__)

FRONTIER_COLUMNS = ["Sequence Length", "Batch Size"]


def _check_non_negative(**values):
    for name, value in values.items():
        if value is None:
            raise ValueError(f"{name} is required")
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")


def calculate_standard_memory(params_billions, precision):
    """Calculate memory needed for model weights (GB) at the given precision."""
    _check_non_negative(params_billions=params_billions)
    precision = Precision(precision)

    memory = params_billions * precision.bytes_per_param
    logger.debug("[Standard] %s memory: %.3f GB", precision.value, memory)
    return memory


def calculate_activation_memory(hidden_size, intermediate_size, chunk_size=config.PREFILL_CHUNK_SIZE):
    """
    Peak activation memory (GB) for one prefill chunk.

    The widest intermediate tensor of a layer is either the MLP projection
    (2 * intermediate_size) or the attention block (4 * hidden_size); one chunk
    of that width is held in 16-bit.
    """
    _check_non_negative(hidden_size=hidden_size, intermediate_size=intermediate_size,
                        chunk_size=chunk_size)
    widest = max(2 * intermediate_size, 4 * hidden_size)
    return (2 * chunk_size * widest) / config.BYTES_PER_GB


def calculate_memory_per_token(hidden_size, num_layers):
    """
    Memory (GB) one token of context occupies across all layers.

    KV cache = 2 (keys + values) * hidden_size * num_layers * 2 bytes
    """
    _check_non_negative(hidden_size=hidden_size, num_layers=num_layers)
    return (4 * hidden_size * num_layers) / config.BYTES_PER_GB


def calculate_prefill_memory(params_billions, hidden_size, num_layers, intermediate_size, precision):
    """Model weights plus one prefill chunk of activations plus one token of KV cache (GB)."""
    model_memory = calculate_standard_memory(params_billions, precision)
    activation_memory = calculate_activation_memory(hidden_size, intermediate_size)
    memory_per_token = calculate_memory_per_token(hidden_size, num_layers)

    total_memory = model_memory + activation_memory + memory_per_token

    logger.debug("[Prefill] %s memory: %.3f GB", Precision(precision).value, total_memory)
    logger.debug("[Prefill] Activation memory: %.3f GB", activation_memory)
    logger.debug("[Prefill] Memory per token: %.6f GB", memory_per_token)
    return total_memory


def calculate_memory_usage(model, precision, prefill_chunking=False):
    """Calculate the memory footprint of a model, broken down by component."""
    model_memory = calculate_standard_memory(model.params, precision)

    if prefill_chunking:
        activation_memory = calculate_activation_memory(model.hidden_size, model.intermediate_size)
        memory_per_token = calculate_memory_per_token(model.hidden_size, model.num_layers)
        total_memory = calculate_prefill_memory(model.params, model.hidden_size, model.num_layers,
                                                model.intermediate_size, precision)
    else:
        activation_memory = 0
        memory_per_token = 0
        total_memory = model_memory

    return {
        "total": total_memory,
        "model_weights": model_memory,
        "activations": activation_memory,
        "per_token": memory_per_token,
    }


def calculate_available_memory(device_memory, model, prefill_chunking=False):
    """Device memory left over after loading the model, for every precision."""
    _check_non_negative(device_memory=device_memory)
    return {
        precision: device_memory - calculate_memory_usage(model, precision, prefill_chunking)["total"]
        for precision in Precision
    }


def is_out_of_memory(used_memory, device_memory):
    return used_memory > device_memory


def footprint_breakdown(device_memory, model, prefill_chunking=False):
    """
    Build the per-precision rows behind the footprint bar chart.

    Returns a DataFrame with one row per precision; rows that exceed the
    device capacity are flagged "Out of Memory" and get no remaining share.
    """
    _check_non_negative(device_memory=device_memory)

    rows = []
    for precision in Precision:
        usage = calculate_memory_usage(model, precision, prefill_chunking)
        overhead = usage["activations"] + usage["per_token"]
        out_of_memory = is_out_of_memory(usage["total"], device_memory)

        rows.append({
            "Precision": precision.value,
            "Model Memory (GB)": usage["model_weights"],
            "Overhead (GB)": overhead,
            "Total (GB)": usage["total"],
            "Remaining (GB)": 0.0 if out_of_memory else device_memory - usage["total"],
            "Device Memory (GB)": device_memory,
            "Out of Memory": out_of_memory,
        })

    return pd.DataFrame(rows)


def generate_frontier(available_memory, memory_per_token,
                      max_seq_length=config.MAX_SEQ_LENGTH, max_batch_size=config.MAX_BATCH_SIZE):
    """
    Largest batch size that fits in available_memory for each sequence length.

    Sequence lengths 1..max_seq_length-1 are swept; a point is kept when its
    batch size lies in (1, max_batch_size].
    """
    if memory_per_token is None or memory_per_token <= 0:
        raise ValueError(f"memory_per_token must be positive, got {memory_per_token}")

    seq_lengths = np.arange(1, max_seq_length)
    batch_sizes = available_memory / (seq_lengths * memory_per_token)
    keep = (batch_sizes > 1) & (batch_sizes <= max_batch_size)

    return pd.DataFrame({
        "Sequence Length": seq_lengths[keep],
        "Batch Size": batch_sizes[keep],
    }, columns=FRONTIER_COLUMNS)


def frontier_by_precision(device_memory, model, prefill_chunking=False):
    """Frontier curves for every precision, stacked in long format."""
    available = calculate_available_memory(device_memory, model, prefill_chunking)
    memory_per_token = calculate_memory_per_token(model.hidden_size, model.num_layers)

    frames = []
    for precision, memory in available.items():
        frame = generate_frontier(memory, memory_per_token)
        frame["Precision"] = precision.value
        logger.debug("%s frontier: %d points (available %.2f GB)",
                     precision.value, len(frame), memory)
        frames.append(frame)

    return pd.concat(frames, ignore_index=True)


def inputs_ready(model_config):
    """
    Whether every field the current calculator mode needs is filled in.

    Missing or non-positive values mean the user has not finished typing, so
    nothing is rendered yet.
    """
    required = ["device_memory", "params", "hidden_size", "num_layers"]
    if model_config.get("prefill_chunking"):
        required.append("intermediate_size")

    for key in required:
        value = model_config.get(key)
        if value is None or value <= 0:
            return False
    return True
