"""Evolvable neural networks with mutation, crossover, Hebbian learning and memory consolidation."""