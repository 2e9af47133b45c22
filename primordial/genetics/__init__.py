"""Sexual reproduction, crossover, phylogeny tracking and diversity metrics."""