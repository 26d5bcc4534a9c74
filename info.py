import config


def get_reference_information():
    """Return reference information as a markdown string."""
    return f"""
### Precision Explained:
- **32-bit**: Full precision floating point, 4 bytes per parameter
- **16-bit**: Half precision (FP16/BF16), 2 bytes per parameter
- **8-bit**: Integer quantization, 1 byte per parameter
- **4-bit**: Aggressive quantization (GPTQ/AWQ style), half a byte per parameter
- **Formula**: Model Memory (GB) = Parameters (billions) × bytes per parameter

### Prefill Chunking Explained:
- **What it is**: Long prompts are processed in fixed chunks of {config.PREFILL_CHUNK_SIZE} tokens instead of all at once
- **Why it matters**: Peak activation memory is bounded by the chunk size, not the prompt length
- **Formula**: Activation Memory ≈ 2 × chunk_size × max(2 × intermediate_size, 4 × hidden_size) bytes
- **Cost**: The activation overhead is reserved on the device on top of the model weights

### Maximum Batch Size / Sequence Length:
- **Memory per token**: 4 × hidden_size × num_layers bytes (keys and values in 16-bit)
- **Available memory**: Device memory minus the model footprint at each precision
- **Formula**: Batch Size = Available Memory / (Sequence Length × Memory per Token)
- **Chart range**: Sequence lengths up to {config.MAX_SEQ_LENGTH} tokens and batch sizes up to {config.MAX_BATCH_SIZE}
- Any point below a curve fits on the device at that precision

### Reading the Charts:
- A bar marked **Out of Memory** means the model does not fit on the device at that precision
- Drag to pan and scroll to zoom the line chart; hover a curve to read off values

### References:
- These calculations are approximations and actual requirements may vary
- Runtime overhead (CUDA context, framework buffers, fragmentation) is not included
- KV cache estimates assume standard multi-head attention without grouped-query sharing
"""
