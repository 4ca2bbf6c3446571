import math

import numpy as np
import pytest

from neural_network import (NeuralNetwork, InvalidTopology, TopologyMismatch,
                            copy_parameters)
from tests.helpers import zero_network


def test_needs_two_layers():
    with pytest.raises(InvalidTopology):
        NeuralNetwork([3])


def test_every_layer_needs_a_neuron():
    with pytest.raises(InvalidTopology):
        NeuralNetwork([3, 0, 2])


def test_parameters_start_within_half():
    net = NeuralNetwork([6, 4, 2], np.random.default_rng(1))
    for p in net.biases + net.weights:
        assert np.all(np.abs(p) <= 0.5)
    assert [w.shape for w in net.weights] == [(4, 6), (2, 4)]


def test_forward_is_deterministic():
    net = NeuralNetwork([5, 3, 2], np.random.default_rng(2))
    inputs = [0.1, -0.2, 0.3, 0.0, 1.0]
    first = net.forward(inputs)
    second = net.forward(inputs)
    assert np.array_equal(first, second)
    assert np.all(np.abs(first) <= 1.0)


def test_forward_rejects_wrong_input_length():
    net = NeuralNetwork([3, 2])
    with pytest.raises(ValueError):
        net.forward([1.0, 2.0])


def test_output_bias_only_network():
    net = zero_network([2, 2])
    net.biases[-1][:] = 1.0
    out = net.forward([0.7, -0.4])
    assert out == pytest.approx([math.tanh(1.0), math.tanh(1.0)])


@pytest.mark.parametrize("seed", range(20))
def test_mutation_always_changes_something(seed):
    net = NeuralNetwork([3, 2], np.random.default_rng(seed))
    before = net.serialize()
    identity = net.identity
    net.mutate(1, 0.5)
    assert net.serialize() != before
    assert net.identity != identity


def test_mutation_magnitude_bounds_each_change():
    net = NeuralNetwork([10, 5, 2], np.random.default_rng(3))
    before = net.serialize()
    net.mutate(30, 0.5)
    deltas = np.abs(np.subtract(net.serialize(), before))
    assert deltas.max() <= 0.5


class NeverBelowChance:
    """Generator stub whose draws never fall under any mutation chance."""

    def random(self, shape):
        return np.ones(shape)

    def uniform(self, low, high, size):
        raise AssertionError("no parameter should be selected")


def test_mutation_gives_up_when_nothing_changes():
    net = NeuralNetwork([3, 2], np.random.default_rng(4))
    net.rng = NeverBelowChance()
    before = net.serialize()
    identity = net.identity
    with pytest.raises(RuntimeError):
        net.mutate(0.001, 0.5)
    assert net.identity == identity
    assert net.serialize() == before


@pytest.mark.parametrize("percent, magnitude", [(0, 0.5), (-5, 0.5), (101, 0.5), (30, 0)])
def test_mutation_rejects_bad_arguments(percent, magnitude):
    net = NeuralNetwork([3, 2])
    with pytest.raises(ValueError):
        net.mutate(percent, magnitude)


def test_serialize_layout():
    net = zero_network([2, 2])
    net.fitness = 42.0
    net.biases[1][:] = [1.0, 2.0]
    net.weights[0][:] = [[3.0, 4.0], [5.0, 6.0]]
    assert net.serialize() == [42.0, 0.0, 0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    assert net.parameter_count() == 8


def test_deserialize_restores_everything():
    source = NeuralNetwork([4, 3, 2], np.random.default_rng(4))
    source.fitness = 1234.5
    target = NeuralNetwork([4, 3, 2], np.random.default_rng(5))
    target.deserialize(source.serialize())
    assert target.fitness == 1234.5
    assert target.serialize() == source.serialize()


def test_deserialize_mismatch_leaves_network_untouched():
    net = NeuralNetwork([4, 2], np.random.default_rng(6))
    before = net.serialize()
    with pytest.raises(TopologyMismatch):
        net.deserialize([0.0] * 5)
    assert net.serialize() == before


def test_save_and_load(tmp_path):
    path = tmp_path / "bee.ai"
    source = NeuralNetwork([3, 4, 2], np.random.default_rng(7))
    source.fitness = 7.25
    source.save(str(path))
    assert len(path.read_text().splitlines()) == 1 + source.parameter_count()

    target = NeuralNetwork([3, 4, 2])
    target.load(str(path))
    assert target.serialize() == source.serialize()


def test_load_into_other_topology_fails(tmp_path):
    path = tmp_path / "bee.ai"
    NeuralNetwork([3, 2]).save(str(path))
    target = NeuralNetwork([4, 2])
    with pytest.raises(TopologyMismatch):
        target.load(str(path))


def test_copy_parameters_is_deep():
    source = NeuralNetwork([3, 2], np.random.default_rng(8))
    target = NeuralNetwork([3, 2], np.random.default_rng(9))
    copy_parameters(source, target)
    assert target.serialize()[1:] == source.serialize()[1:]

    source.weights[0][0, 0] += 1.0
    assert target.weights[0][0, 0] != source.weights[0][0, 0]


def test_copy_parameters_needs_same_layers():
    with pytest.raises(TopologyMismatch):
        copy_parameters(NeuralNetwork([3, 2]), NeuralNetwork([3, 1]))


def test_clone_is_independent():
    net = NeuralNetwork([3, 2], np.random.default_rng(10))
    net.fitness = 3.0
    twin = net.clone()
    assert twin.identity == net.identity
    assert twin.serialize() == net.serialize()
    twin.mutate(100, 0.5)
    assert twin.serialize() != net.serialize()
