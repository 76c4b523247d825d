"""
Genetic algorithm for the autopilot, run headlessly.

- Every genome of a generation plays the same seeded episode through a
  `Session` stepped on a virtual clock, so no window is opened.
- Top-K elites survive; children come from tournament parents, uniform or
  blend crossover over the flat weight vector, and masked Gaussian mutation.
- The flap threshold is evolved alongside the weights.
- The best genome so far is written to <artifacts>/pilot.pt + pilot.json.

Example:
    flappy-evolve --pop 24 --gens 30 --elites 6 --hidden1 32 --hidden2 16
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import random
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import List, Tuple

import torch
from torch.nn.utils import vector_to_parameters

from flappy.game.constants import META_PATH, TICK_MS
from flappy.game.controls import Action
from flappy.game.session import Session
from flappy.game.state import Phase
from flappy.logs import setup_logging
from .pilot import Autopilot, PilotConfig, PilotNet, build_pilot, save_pilot

logger = logging.getLogger(__name__)


@dataclass
class EvolveConf:
    pop_size: int = 24
    elites: int = 6
    generations: int = 20
    mutation_prob: float = 0.2
    mutation_sigma: float = 0.1
    thr_sigma: float = 0.05
    scheme: str = "uniform"
    blend_alpha: float = 0.5
    threshold: float = 0.5    # initial threshold seed
    max_ticks: int = 3000     # ~48 s of play per episode
    seed: int = 123
    artifacts: str = META_PATH


@dataclass
class Genome:
    weights: torch.Tensor
    threshold: float = 0.5
    fitness: float = field(default=float("-inf"))

    @classmethod
    def random(cls, cfg: PilotConfig, threshold: float) -> "Genome":
        n = sum(p.numel() for p in build_pilot(**asdict(cfg)).parameters())
        return cls(torch.randn(n) * 0.5, threshold=threshold)

    def clone(self) -> "Genome":
        return Genome(self.weights.clone(), self.threshold, self.fitness)

    def to_model(self, cfg: PilotConfig) -> PilotNet:
        model = build_pilot(**asdict(cfg))
        with torch.no_grad():
            vector_to_parameters(self.weights, model.parameters())
        model.eval()
        return model

    def to_pilot(self, cfg: PilotConfig) -> Autopilot:
        return Autopilot(self.to_model(cfg), threshold=self.threshold)


def crossover(a: Genome, b: Genome, scheme: str = "uniform", alpha: float = 0.5) -> Genome:
    """scheme="uniform": each weight from a or b (50/50); scheme="blend": alpha*a + (1-alpha)*b."""
    if scheme == "uniform":
        mask = torch.rand(a.weights.shape) < 0.5
        weights = torch.where(mask, a.weights, b.weights)
    elif scheme == "blend":
        weights = alpha * a.weights + (1.0 - alpha) * b.weights
    else:
        raise ValueError(f"Unknown crossover scheme: {scheme}")
    return Genome(weights, threshold=0.5 * (a.threshold + b.threshold))


def mutate(g: Genome, rng: random.Random, prob: float, sigma: float, thr_sigma: float = 0.05) -> Genome:
    mask = (torch.rand(g.weights.shape) < prob).float()
    noise = torch.randn(g.weights.shape) * sigma
    threshold = max(0.1, min(0.9, g.threshold + rng.gauss(0.0, thr_sigma)))
    return Genome(g.weights + mask * noise, threshold=threshold)


def tournament(pop: List[Genome], rng: random.Random, k: int = 5) -> Genome:
    cand = rng.sample(pop, min(k, len(pop)))
    return max(cand, key=lambda g: g.fitness)


def pick_parents(pop: List[Genome], rng: random.Random, k: int = 5) -> Tuple[Genome, Genome]:
    a = tournament(pop, rng, k)
    b = tournament(pop, rng, k)
    if b is a:
        others = [g for g in pop if g is not a]
        if others:
            b = rng.choice(others)
    return a, b


def play_episode(pilot: Autopilot, seed: int, max_ticks: int) -> Tuple[float, int]:
    """Play one game to game over (or `max_ticks`); returns (score, ticks)."""
    session = Session(seed=seed, pilot=pilot)
    session.post(Action.START)
    while session.ticks < max_ticks:
        session.pump(TICK_MS)
        if session.phase != Phase.PLAYING:
            break
    return session.state.score, session.ticks


def evaluate(genomes: List[Genome], cfg: PilotConfig, seed: int, max_ticks: int):
    # fitness = pipe pairs*10 + survival*0.01
    for g in genomes:
        score, ticks = play_episode(g.to_pilot(cfg), seed, max_ticks)
        g.fitness = score * 10.0 + ticks * 0.01


def save_best(best: Genome, cfg: PilotConfig, artifacts: str):
    model_path = os.path.join(artifacts, "pilot.pt")
    save_pilot(best.to_model(cfg), model_path)
    with open(os.path.join(artifacts, "pilot.json"), "w", encoding="utf-8") as f:
        json.dump({
            "threshold": best.threshold,
            "fitness": best.fitness,
            "model_path": model_path,
        }, f, indent=2)


def evolve(conf: EvolveConf, cfg: PilotConfig) -> Genome:
    if conf.generations < 1 or conf.pop_size < 1:
        raise ValueError(f"need at least one generation and one genome, got gens={conf.generations} pop={conf.pop_size}")
    os.makedirs(conf.artifacts, exist_ok=True)
    with open(os.path.join(conf.artifacts, "run_info.json"), "w", encoding="utf-8") as f:
        json.dump({
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "conf": asdict(conf),
            "pilot": asdict(cfg),
        }, f, indent=2)

    rng = random.Random(conf.seed)
    torch.manual_seed(conf.seed)

    pop = [Genome.random(cfg, conf.threshold) for _ in range(conf.pop_size)]
    best: Genome | None = None

    for gen in range(1, conf.generations + 1):
        # different world each generation, same world for the whole population
        evaluate(pop, cfg, seed=rng.randint(0, 2**31 - 1), max_ticks=conf.max_ticks)

        pop.sort(key=lambda g: g.fitness, reverse=True)
        if best is None or pop[0].fitness > best.fitness:
            best = pop[0].clone()
            save_best(best, cfg, conf.artifacts)
        mean = sum(g.fitness for g in pop) / len(pop)
        logger.info("gen %02d best=%.2f mean=%.2f thr=%.2f", gen, pop[0].fitness, mean, pop[0].threshold)

        # Selection
        elites = [g.clone() for g in pop[:min(conf.elites, len(pop))]]
        children: List[Genome] = []
        while len(elites) + len(children) < conf.pop_size:
            a, b = pick_parents(pop, rng)
            child = crossover(a, b, scheme=conf.scheme, alpha=conf.blend_alpha)
            children.append(mutate(child, rng, conf.mutation_prob, conf.mutation_sigma, conf.thr_sigma))
        pop = elites + children

    return best


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def main():
    parser = argparse.ArgumentParser(description="Evolve a Flappy Bird autopilot")
    parser.add_argument("--pop", type=_positive_int, default=24)
    parser.add_argument("--gens", type=_positive_int, default=20)
    parser.add_argument("--elites", type=int, default=6)
    parser.add_argument("--mut_p", type=float, default=0.2)
    parser.add_argument("--mut_sigma", type=float, default=0.1)
    parser.add_argument("--thr_sigma", type=float, default=0.05)
    parser.add_argument("--threshold", type=float, default=0.5)
    parser.add_argument("--scheme", choices=["uniform", "blend"], default="uniform")
    parser.add_argument("--blend_alpha", type=float, default=0.5)
    parser.add_argument("--max_ticks", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=123)
    parser.add_argument("--artifacts", default=META_PATH)
    # architecture
    parser.add_argument("--hidden1", type=int, default=32)
    parser.add_argument("--hidden2", type=int, default=16)
    parser.add_argument("--activation", choices=["relu", "tanh"], default="relu")
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()

    setup_logging(args.log_level)
    conf = EvolveConf(
        pop_size=args.pop, elites=args.elites, generations=args.gens,
        mutation_prob=args.mut_p, mutation_sigma=args.mut_sigma, thr_sigma=args.thr_sigma,
        scheme=args.scheme, blend_alpha=args.blend_alpha, threshold=args.threshold,
        max_ticks=args.max_ticks, seed=args.seed, artifacts=args.artifacts,
    )
    cfg = PilotConfig(hidden1=args.hidden1, hidden2=args.hidden2, activation=args.activation)
    best = evolve(conf, cfg)
    logger.info("saved %s (fitness %.2f)", os.path.join(conf.artifacts, "pilot.pt"), best.fitness)


if __name__ == "__main__":
    main()
