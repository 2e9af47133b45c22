# primordial

Building blocks for an evolving ecosystem. The package includes:

- small dense neural networks that grow through structural mutation
- Hebbian lifetime learning
- crossover of networks
- a phylogenetic tree
- sexual reproduction rules
- diversity metrics
- the spatial and food grids that organisms live on

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install .[test]
```

## Neural networks

`primordial.neural.network.NeuralNet` is a feed-forward network with tanh
activations. Each layer's weights have shape (inputs, outputs).

```python
from primordial.neural.network import NeuralNet
from primordial.neural.mutations import MutationConfig, mutate, add_neuron
from primordial.neural.crossover import CrossoverStrategy, crossover_with_strategy

brain = NeuralNet.new_with_instincts(24, 10)
outputs = brain.forward([0.0] * 24)      # ten tanh activations in [-1, 1]

add_neuron(brain)                         # appends a hidden layer of 2-6 neurons
mutate(brain, MutationConfig())
print(brain.complexity())                 # number of hidden layers

other = NeuralNet.new_minimal(24, 10)
child = crossover_with_strategy(brain, other, 50.0, 50.0, CrossoverStrategy.AVERAGE)
```

Strategies in `CrossoverStrategy`:

- `FITTER_PARENT`, the default used by `crossover`
- `AVERAGE`
- `UNIFORM`

Networks round-trip through plain dictionaries with `NeuralNet.to_dict()` and
`NeuralNet.from_dict()`. Learning state is not included. `genome_hash()` gives a
64-bit identifier computed from the structure and a sample of the weights.

### Hebbian learning

A forward pass records activations, and a reward then adjusts the weights:

```python
brain.enable_learning(0.01)
brain.forward_with_learning([0.5] * 24, time=0)
brain.learn(1.0)
print(brain.learning_stats())
```

`primordial.neural.hebbian.LearningConfig` can scale the learning rate with brain
complexity, through `enable_learning_with_config` and `update_learning_rate`.

`primordial.neural.memory_consolidation.MemoryConsolidator` gathers short-term
`WeightChange` records. It folds them into importance-weighted long-term averages
and reports the averages that reach a threshold.

## Genetics

```python
from primordial.genetics.phylogeny import PhylogeneticTree

tree = PhylogeneticTree()
tree.record_birth(0, None, None, 0, 5, 100.0, 1.0, 1, 0, 12345)
tree.record_birth(1, 0, None, 100, 6, 80.0, 1.1, 1, 1, 12346)
tree.genetic_distance(0, 1)     # 1
tree.export_all_newick()        # ["(1:1)0:0;"]
```

The other genetics modules:

- `primordial.genetics.sex`
  - `Sex`
  - the mating rules in `SexualReproductionSystem`
  - `check_speciation_compatibility`, which takes a `SpeciationConfig` of genetic-distance limits
- `primordial.genetics.crossover`
  - `CrossoverSystem`, a fitness-weighted crossover of two brains
  - a 70/30 blend towards a parent that is more than 20% fitter, otherwise an average
- `primordial.genetics.diversity`
  - Simpson, Shannon, effective-population and heterozygosity metrics
  - `DiversityHistory`, the history of the metrics over time, with CSV export

The diversity functions accept any organism objects that have:

- `id`
- `lineage_id`
- `offspring_count`
- a `brain` with `complexity()`
- `is_alive()`

## Grids

```python
from primordial.grid import FoodGrid, SpatialIndex

food = FoodGrid(80, 50.0)
food.set(10, 10, 25.0)
food.consume(10, 10, 10.0)      # 10.0 eaten, 15.0 left

index = SpatialIndex(80)
index.insert(10, 10, 0)
index.query_radius(10, 10, 2)   # [0]
```

`ComplexityGrid` and `FoodTier` assign food a complexity of simple, medium or
complex. A tier decides how much energy the food is worth.

## Memory monitoring

`primordial.memory_monitor.MemoryMonitor` reads the process's memory use from
`/proc`. Its `check()` returns a `MemoryAction` whose level is one of:

- `OK`
- `WARNING`, given at most once per 1000 time units
- `CRITICAL`

The total memory and the reader function can be passed in. `format_bytes` renders
byte counts for display.

## What this package does not do

This package provides components only. It has:

- no organism or world type and no simulation loop
- no configuration files
- no checkpoint storage
- no command-line program

You build those on top of these modules.

## Running the tests

```
pytest
```