"""
living_trees/cli.py - Command-line interface
"""
import logging
from typing import Dict, List

import click
import numpy as np

from .environment import Environment
from .expressions import evaluate_tree, random_genome
from .genome import LivingTreeGenome


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _shape_stats(genomes: List[LivingTreeGenome]) -> Dict[str, float]:
    sizes = [g.size() for g in genomes]
    depths = [g.depth() for g in genomes]
    return {
        'size_mean': float(np.mean(sizes)),
        'size_max': int(np.max(sizes)),
        'depth_mean': float(np.mean(depths)),
        'depth_max': int(np.max(depths)),
    }


@click.group()
def cli():
    """Living Trees - evolvable tree genomes"""
    pass


@cli.command()
@click.option('--generations', '-g', default=20, help='Number of generations to run')
@click.option('--population', '-p', default=20, help='Population size')
@click.option('--seed', default=None, type=int, help='Random seed for a reproducible run')
@click.option('--max-depth', default=5, help='Maximum depth of the initial random trees')
@click.option('--mutation-rate', default=0.1, help='Mutation rate (0.0-1.0)')
@click.option('--crossover-rate', default=0.7, help='Crossover rate (0.0-1.0)')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
def evolve(generations, population, seed, max_depth, mutation_rate, crossover_rate, verbose):
    """Run mutation and crossover over a random population (no selection)"""
    _setup_logging(verbose)
    if population < 2:
        raise click.BadParameter('population must be at least 2', param_hint='--population')

    env = Environment(seed=seed)
    genomes = [random_genome(env, max_depth) for _ in range(population)]
    click.echo(f"Starting run: {generations} generations, population {population}, seed {seed}")

    for gen in range(generations):
        offspring = []
        for i in range(0, len(genomes) - 1, 2):
            child_a, child_b = genomes[i].crossover(genomes[i + 1], crossover_rate, env)
            # Crossover may hand back the parents themselves
            if child_a is genomes[i]:
                child_a, child_b = child_a.copy(), child_b.copy()
            offspring.extend([child_a, child_b])
        if len(genomes) % 2:
            offspring.append(genomes[-1].copy())

        for genome in offspring:
            genome.mutate(mutation_rate, env)
            genome.root_gene.validate()

        genomes = offspring
        stats = _shape_stats(genomes)

        if verbose or gen % 5 == 0 or gen == generations - 1:
            click.echo(f"Gen {gen:3d}/{generations}: "
                       f"Size={stats['size_mean']:.1f} (max {stats['size_max']}) "
                       f"Depth={stats['depth_mean']:.1f} (max {stats['depth_max']})")

    click.echo("Run complete")


@cli.command()
@click.option('--seed', default=None, type=int, help='Random seed')
@click.option('--max-depth', default=5, help='Maximum tree depth')
@click.option('--grid', default=16, type=click.IntRange(min=1), help='Evaluation grid resolution')
def inspect(seed, max_depth, grid):
    """Build one random genome and summarize it"""
    env = Environment(seed=seed)
    genome = random_genome(env, max_depth)

    coords = np.linspace(-1.0, 1.0, grid)
    x, y = np.meshgrid(coords, coords)
    output = evaluate_tree(genome.root_gene, x, y, 0.0)

    click.echo(f"Size: {genome.size()}")
    click.echo(f"Depth: {genome.depth()}")
    click.echo(f"Root: {genome.root_gene.value!r}")
    click.echo(f"Output range: [{np.min(output):.4f}, {np.max(output):.4f}], mean {np.mean(output):.4f}")


if __name__ == '__main__':
    cli()
