from dataclasses import dataclass
from enum import Enum

import config


class Precision(str, Enum):
    """Numeric width used to store model weights."""
    FP32 = "32-bit"
    FP16 = "16-bit"
    INT8 = "8-bit"
    INT4 = "4-bit"

    @property
    def bytes_per_param(self):
        return PRECISION_FACTORS[self]

    @property
    def color(self):
        return config.PRECISION_COLORS[self.value]


# Bytes per parameter for each precision
PRECISION_FACTORS = {
    Precision.FP32: 4,
    Precision.FP16: 2,
    Precision.INT8: 1,
    Precision.INT4: 0.5,
}


@dataclass(frozen=True)
class ModelSpec:
    name: str
    params: float  # billions
    hidden_size: int
    intermediate_size: int
    num_layers: int


@dataclass(frozen=True)
class DeviceSpec:
    name: str
    memory: float  # GB


MODELS = [
    # LLaMA 3.1
    ModelSpec("LLaMA 3.1 (70B)", 70, 8192, 28672, 80),
    ModelSpec("LLaMA 3.1 (8B)", 8, 4096, 14336, 32),

    # LLaMA 3
    ModelSpec("LLaMA 3 (70B)", 70, 8192, 28672, 80),
    ModelSpec("LLaMA 3 (8B)", 8, 4096, 14336, 32),

    # LLaMA 2
    ModelSpec("LLaMA 2 (70B)", 70, 8192, 28672, 80),
    ModelSpec("LLaMA 2 (13B)", 13, 5120, 13824, 40),
    ModelSpec("LLaMA 2 (7B)", 7, 4096, 11008, 32),

    # Mistral
    ModelSpec("Mistral (13B NeuralPivot)", 13, 4096, 14336, 60),
    ModelSpec("Mistral (7B)", 7, 4096, 14336, 32),
    ModelSpec("Mistral (13B Amethyst)", 13, 5120, 13824, 40),

    # Qwen
    ModelSpec("Qwen (7B)", 7, 4096, 22016, 32),
    ModelSpec("Qwen (1.5 7B)", 7, 4096, 11008, 32),

    # Llava
    ModelSpec("Llava (1.6 34B)", 34, 7168, 20480, 60),
    ModelSpec("Llava (1.5 13B)", 13, 5120, 13824, 40),
    ModelSpec("Llava (7B)", 7, 4096, 11008, 32),

    # Gemma
    ModelSpec("Gemma (27B)", 27, 4608, 36864, 46),
    ModelSpec("Gemma (2.9B)", 2.9, 3584, 14336, 42),
    ModelSpec("Gemma (2B)", 2, 2048, 16384, 18),

    # Mixtral (MoE, total params)
    ModelSpec("Mixtral (46B)", 46, 4096, 14336, 32),
]

DEVICES = [
    # Consumer GPUs
    DeviceSpec("NVIDIA RTX 3060 (12GB)", 12),
    DeviceSpec("NVIDIA RTX 3080 (10GB)", 10),
    DeviceSpec("NVIDIA RTX 3090 (24GB)", 24),
    DeviceSpec("NVIDIA RTX 4070 Ti (12GB)", 12),
    DeviceSpec("NVIDIA RTX 4080 (16GB)", 16),
    DeviceSpec("NVIDIA RTX 4090 (24GB)", 24),

    # Data center GPUs
    DeviceSpec("NVIDIA T4 (16GB)", 16),
    DeviceSpec("NVIDIA L4 (24GB)", 24),
    DeviceSpec("NVIDIA A10G (24GB)", 24),
    DeviceSpec("NVIDIA V100 (32GB)", 32),
    DeviceSpec("NVIDIA A100 (40GB)", 40),
    DeviceSpec("NVIDIA A100 (80GB)", 80),
    DeviceSpec("NVIDIA L40S (48GB)", 48),
    DeviceSpec("NVIDIA H100 (80GB)", 80),
    DeviceSpec("NVIDIA H200 (141GB)", 141),

    # Other accelerators
    DeviceSpec("AMD MI250X (128GB)", 128),
    DeviceSpec("AMD MI300X (192GB)", 192),
    DeviceSpec("Apple M2 Ultra (192GB)", 192),
]


def get_known_models():
    """Return a dictionary of preset models keyed by display name."""
    return {model.name: model for model in MODELS}


def get_device_options():
    """Return a dictionary of preset devices keyed by display name."""
    return {device.name: device for device in DEVICES}


def get_model(name):
    """Look up a preset model by name; raises KeyError for unknown names."""
    return get_known_models()[name]


def get_device(name):
    """Look up a preset device by name; raises KeyError for unknown names."""
    return get_device_options()[name]
