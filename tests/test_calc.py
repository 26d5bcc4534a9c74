import pytest

import calc
from presets import ModelSpec, Precision, get_model

LLAMA_2_7B = ModelSpec("LLaMA 2 (7B)", 7, 4096, 11008, 32)


def test_standard_memory_examples():
    assert calc.calculate_standard_memory(7, Precision.FP16) == pytest.approx(14)
    assert calc.calculate_standard_memory(7, Precision.INT4) == pytest.approx(3.5)
    assert calc.calculate_standard_memory(7, "32-bit") == pytest.approx(28)


@pytest.mark.parametrize("params", [0.5, 2.9, 7, 70, 175])
def test_standard_memory_shrinks_with_precision(params):
    memories = [calc.calculate_standard_memory(params, precision) for precision in Precision]
    assert memories == sorted(memories, reverse=True)


def test_standard_memory_rejects_negative_params():
    with pytest.raises(ValueError, match="params_billions"):
        calc.calculate_standard_memory(-1, Precision.FP16)


def test_standard_memory_rejects_unknown_precision():
    with pytest.raises(ValueError):
        calc.calculate_standard_memory(7, "2-bit")


def test_activation_memory_uses_widest_tensor():
    # MLP dominates: 2 * 11008 > 4 * 4096
    assert calc.calculate_activation_memory(4096, 11008) == pytest.approx(2 * 512 * 2 * 11008 / 1e9)
    # Attention dominates: 4 * 4096 > 2 * 4096
    assert calc.calculate_activation_memory(4096, 4096) == pytest.approx(2 * 512 * 4 * 4096 / 1e9)


def test_memory_per_token():
    assert calc.calculate_memory_per_token(4096, 32) == pytest.approx(4 * 4096 * 32 / 1e9)


def test_prefill_memory_adds_activation_and_token_terms():
    total = calc.calculate_prefill_memory(7, 4096, 32, 11008, Precision.FP16)
    expected = 14 + 2 * 512 * 2 * 11008 / 1e9 + 4 * 4096 * 32 / 1e9
    assert total == pytest.approx(expected)


def test_memory_usage_breakdown_standard_mode():
    usage = calc.calculate_memory_usage(LLAMA_2_7B, Precision.INT8)
    assert usage == {"total": 7, "model_weights": 7, "activations": 0, "per_token": 0}


def test_memory_usage_breakdown_prefill_matches_prefill_memory():
    usage = calc.calculate_memory_usage(LLAMA_2_7B, Precision.FP32, prefill_chunking=True)
    assert usage["total"] == pytest.approx(calc.calculate_prefill_memory(7, 4096, 32, 11008, Precision.FP32))
    assert usage["total"] == pytest.approx(usage["model_weights"] + usage["activations"] + usage["per_token"])


def test_available_memory_covers_every_precision():
    available = calc.calculate_available_memory(24, LLAMA_2_7B)
    assert set(available) == set(Precision)
    assert available[Precision.FP32] == pytest.approx(-4)
    assert available[Precision.INT4] == pytest.approx(20.5)


def test_footprint_breakdown_flags_out_of_memory():
    breakdown = calc.footprint_breakdown(24, LLAMA_2_7B).set_index("Precision")

    assert bool(breakdown.loc["32-bit", "Out of Memory"]) is True
    assert breakdown.loc["32-bit", "Remaining (GB)"] == 0
    assert bool(breakdown.loc["16-bit", "Out of Memory"]) is False
    assert breakdown.loc["16-bit", "Remaining (GB)"] == pytest.approx(10)


def test_footprint_breakdown_counts_activation_against_capacity():
    # 14 GB of weights fit in 14 GB, but the prefill overhead pushes it over
    standard = calc.footprint_breakdown(14, LLAMA_2_7B).set_index("Precision")
    prefill = calc.footprint_breakdown(14, LLAMA_2_7B, prefill_chunking=True).set_index("Precision")

    assert bool(standard.loc["16-bit", "Out of Memory"]) is False
    assert bool(prefill.loc["16-bit", "Out of Memory"]) is True
    assert (prefill["Overhead (GB)"] > 0).all()


def test_is_out_of_memory_boundary():
    assert not calc.is_out_of_memory(24, 24)
    assert calc.is_out_of_memory(24.01, 24)


def test_frontier_example_point():
    frontier = calc.generate_frontier(10, 0.001)
    point = frontier[frontier["Sequence Length"] == 100]

    assert len(point) == 1
    assert point["Batch Size"].iloc[0] == pytest.approx(100)


def test_frontier_respects_batch_bounds():
    frontier = calc.generate_frontier(10, 0.001)

    assert (frontier["Batch Size"] > 1).all()
    assert (frontier["Batch Size"] <= 128).all()
    assert frontier["Sequence Length"].min() >= 1
    assert frontier["Sequence Length"].max() <= 4095


def test_frontier_is_monotonically_decreasing():
    frontier = calc.generate_frontier(20.5, calc.calculate_memory_per_token(4096, 32))
    assert not frontier.empty
    assert frontier["Batch Size"].is_monotonic_decreasing
    assert frontier["Sequence Length"].is_monotonic_increasing


def test_frontier_empty_without_available_memory():
    assert calc.generate_frontier(0, 0.001).empty
    assert calc.generate_frontier(-4, 0.001).empty


def test_frontier_rejects_non_positive_memory_per_token():
    with pytest.raises(ValueError):
        calc.generate_frontier(10, 0)


def test_frontier_by_precision_labels_curves():
    frontier = calc.frontier_by_precision(80, get_model("LLaMA 2 (7B)"))

    assert list(frontier.columns) == ["Sequence Length", "Batch Size", "Precision"]
    assert set(frontier["Precision"]) == {p.value for p in Precision}


def test_frontier_by_precision_drops_precisions_that_do_not_fit():
    frontier = calc.frontier_by_precision(24, LLAMA_2_7B)
    assert "32-bit" not in set(frontier["Precision"])


def test_estimates_are_idempotent():
    first = calc.frontier_by_precision(24, LLAMA_2_7B, prefill_chunking=True)
    second = calc.frontier_by_precision(24, LLAMA_2_7B, prefill_chunking=True)
    assert first.equals(second)
    assert calc.footprint_breakdown(24, LLAMA_2_7B).equals(calc.footprint_breakdown(24, LLAMA_2_7B))


@pytest.mark.parametrize("model_config, ready", [
    ({"device_memory": 24, "params": 7, "hidden_size": 4096, "num_layers": 32}, True),
    ({"device_memory": None, "params": 7, "hidden_size": 4096, "num_layers": 32}, False),
    ({"device_memory": 24, "params": 0, "hidden_size": 4096, "num_layers": 32}, False),
    ({"device_memory": 24, "params": 7, "hidden_size": 4096, "num_layers": 32,
      "prefill_chunking": True, "intermediate_size": None}, False),
    ({"device_memory": 24, "params": 7, "hidden_size": 4096, "num_layers": 32,
      "prefill_chunking": True, "intermediate_size": 11008}, True),
])
def test_inputs_ready(model_config, ready):
    assert calc.inputs_ready(model_config) is ready


def test_frontier_batch_bounds_are_exclusive_below_inclusive_above():
    # 64 / (seq * 0.5) is exact in binary: 128.0 at seq=1, 1.0 at seq=128
    frontier = calc.generate_frontier(64, 0.5)
    seq_lengths = set(frontier["Sequence Length"])

    assert 1 in seq_lengths
    assert frontier["Batch Size"].max() == 128.0
    assert 127 in seq_lengths
    assert 128 not in seq_lengths
    assert frontier["Sequence Length"].max() == 127


def test_memory_usage_prefill_total_goes_through_prefill_memory(monkeypatch):
    calls = []
    original = calc.calculate_prefill_memory

    def recording_prefill_memory(*args):
        calls.append(args)
        return original(*args)

    monkeypatch.setattr(calc, "calculate_prefill_memory", recording_prefill_memory)

    usage = calc.calculate_memory_usage(LLAMA_2_7B, Precision.FP16, prefill_chunking=True)
    assert calls == [(7, 4096, 32, 11008, Precision.FP16)]
    assert usage["total"] == original(7, 4096, 32, 11008, Precision.FP16)

    calc.calculate_memory_usage(LLAMA_2_7B, Precision.FP16)
    assert len(calls) == 1
