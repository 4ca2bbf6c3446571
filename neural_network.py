"""
Neural Network Brain for HiveSim.

A fixed-topology feedforward network. Layer 0 holds the vision inputs,
the last layer the wing outputs:

  [inputs] → [hidden …] → [outputs]

Forward pass (per simulation tick):
  1. Copy the sensor vector into layer 0
  2. For every following layer: tanh(bias + Σ weight · previous)
  3. Return the output layer (every value in −1..1)

Networks never learn by gradient; they are cloned and mutated by the
population controller between generations.
"""

import uuid

import numpy as np
from config import MAX_MUTATION_ATTEMPTS


class InvalidTopology(ValueError):
    """Fewer than two layers, or a layer without neurons."""


class TopologyMismatch(ValueError):
    """Stored or copied parameters do not fit the live topology."""


class NeuralNetwork:
    """
    Feedforward network with one bias vector per layer and one weight
    matrix per layer transition.

    weights[L - 1] has shape (layers[L], layers[L - 1]); biases[0] exists
    but is never used by forward().
    """

    def __init__(self, layers, rng=None):
        layers = [int(n) for n in layers]
        if len(layers) < 2:
            raise InvalidTopology(
                f"need at least an input and an output layer, got {layers}")
        if any(n < 1 for n in layers):
            raise InvalidTopology(f"every layer needs a neuron, got {layers}")

        self.layers       = layers
        self.rng          = rng if rng is not None else np.random.default_rng()
        self.fitness      = 0.0
        self.last_fitness = 0.0
        self.identity     = uuid.uuid4().hex

        self.neurons = [np.zeros(n) for n in layers]
        self.biases  = [self.rng.uniform(-0.5, 0.5, size=n) for n in layers]
        self.weights = [
            self.rng.uniform(-0.5, 0.5, size=(layers[i], layers[i - 1]))
            for i in range(1, len(layers))
        ]

    # ──────────────────────────────────────────────────────────────────────────

    def forward(self, inputs) -> np.ndarray:
        """
        Run one forward pass.

        Args:
            inputs: sequence of length layers[0]

        Returns:
            float array of length layers[-1], values −1..1
        """
        inputs = np.asarray(inputs, dtype=float)
        if inputs.shape != (self.layers[0],):
            raise ValueError(
                f"expected {self.layers[0]} inputs, got {inputs.shape}")

        self.neurons[0][:] = inputs
        for layer in range(1, len(self.layers)):
            total = self.weights[layer - 1] @ self.neurons[layer - 1]
            self.neurons[layer][:] = np.tanh(total + self.biases[layer])
        return self.neurons[-1].copy()

    # ──────────────────────────────────────────────────────────────────────────

    def mutate(self, percent_chance: float, magnitude: float):
        """
        Nudge each bias and weight with probability percent_chance/100 by a
        uniform delta in [-magnitude, magnitude].

        Passes repeat until at least one parameter differs, so a mutated clone
        is never identical to its parent. The network gets a new identity.
        """
        if not 0 < percent_chance <= 100:
            raise ValueError(f"percent_chance must be in (0, 100], got {percent_chance}")
        if magnitude <= 0:
            raise ValueError(f"magnitude must be positive, got {magnitude}")

        chance = percent_chance / 100.0
        params = self.biases + self.weights
        for _ in range(MAX_MUTATION_ATTEMPTS):
            changed = False
            for p in params:
                mask  = self.rng.random(p.shape) < chance
                if not mask.any():
                    continue
                delta = self.rng.uniform(-magnitude, magnitude, size=p.shape)
                before = p.copy()
                p[mask] += delta[mask]
                if not changed and np.any(p != before):
                    changed = True
            if changed:
                self.identity = uuid.uuid4().hex
                return
        raise RuntimeError(
            f"no parameter changed after {MAX_MUTATION_ATTEMPTS} mutation passes")

    # ──────────────────────────────────────────────────────────────────────────
    # Flat parameter dump
    # ──────────────────────────────────────────────────────────────────────────

    def parameter_count(self) -> int:
        """Number of biases plus weights."""
        return (sum(b.size for b in self.biases)
                + sum(w.size for w in self.weights))

    def serialize(self) -> list:
        """Fitness, then biases (layer, neuron), then weights (layer, neuron, prev)."""
        values = [float(self.fitness)]
        for b in self.biases:
            values.extend(float(v) for v in b)
        for w in self.weights:
            values.extend(float(v) for v in w.ravel())  # row-major = neuron, prev
        return values

    def deserialize(self, values):
        """
        Restore fitness and parameters from a flat dump.
        Raises TopologyMismatch without touching anything if the count is wrong.
        """
        values = [float(v) for v in values]
        expected = 1 + self.parameter_count()
        if len(values) != expected:
            raise TopologyMismatch(
                f"dump holds {len(values)} values, topology {self.layers} "
                f"needs {expected}")

        self.fitness = values[0]
        i = 1
        for b in self.biases:
            b[:] = values[i:i + b.size]
            i += b.size
        for w in self.weights:
            w[:] = np.reshape(values[i:i + w.size], w.shape)
            i += w.size

    def save(self, path: str):
        """Write the flat dump, one number per line."""
        with open(path, "w") as f:
            for v in self.serialize():
                f.write(f"{v!r}\n")

    def load(self, path: str):
        """Read a flat dump written by save()."""
        with open(path) as f:
            lines = [line.strip() for line in f]
        self.deserialize(line for line in lines if line)

    # ──────────────────────────────────────────────────────────────────────────

    def clone(self) -> "NeuralNetwork":
        """Independent copy sharing parameters, fitness and identity."""
        twin = NeuralNetwork(self.layers, self.rng)
        copy_parameters(self, twin)
        twin.fitness      = self.fitness
        twin.last_fitness = self.last_fitness
        twin.identity     = self.identity
        return twin

    def summary(self) -> str:
        lines = [f"NeuralNetwork {self.layers} ({self.parameter_count()} parameters)",
                 f"  identity={self.identity}  fitness={self.fitness:.1f}"
                 f"  last={self.last_fitness:.1f}"]
        for i, w in enumerate(self.weights, start=1):
            lines.append(f"  L{i - 1}→L{i}  |w| mean={np.abs(w).mean():.3f}"
                         f"  bias mean={self.biases[i].mean():+.3f}")
        return "\n".join(lines)

    def __repr__(self):
        return (f"NeuralNetwork(layers={self.layers}, fitness={self.fitness}, "
                f"last_fitness={self.last_fitness}, identity={self.identity[:8]})")


# ──────────────────────────────────────────────────────────────────────────────

def copy_parameters(source: NeuralNetwork, destination: NeuralNetwork):
    """Deep-copy biases and weights (not fitness or identity) into destination."""
    if source.layers != destination.layers:
        raise TopologyMismatch(
            f"cannot copy {source.layers} parameters into {destination.layers}")
    for src, dst in zip(source.biases, destination.biases):
        dst[:] = src
    for src, dst in zip(source.weights, destination.weights):
        dst[:] = src
