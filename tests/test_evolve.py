import os
import random

import pytest
import torch

from flappy.ai.evolve import (
    EvolveConf, Genome, crossover, evolve, main, mutate, pick_parents, play_episode, tournament,
)
from flappy.ai.pilot import PilotConfig, load_autopilot


def genome(value, n=6, threshold=0.5, fitness=float("-inf")):
    return Genome(torch.full((n,), float(value)), threshold=threshold, fitness=fitness)


def test_uniform_crossover_takes_each_weight_from_a_parent():
    torch.manual_seed(0)
    child = crossover(genome(0, n=200, threshold=0.2), genome(1, n=200, threshold=0.6))
    assert set(child.weights.tolist()) == {0.0, 1.0}
    assert child.threshold == pytest.approx(0.4)


def test_blend_crossover():
    child = crossover(genome(0), genome(1), scheme="blend", alpha=0.25)
    assert torch.allclose(child.weights, torch.full((6,), 0.75))


def test_unknown_crossover_scheme():
    with pytest.raises(ValueError):
        crossover(genome(0), genome(1), scheme="single-point")


def test_mutation_probability_zero_keeps_weights():
    g = genome(2, threshold=0.88)
    child = mutate(g, random.Random(1), prob=0.0, sigma=1.0, thr_sigma=0.5)
    assert torch.equal(child.weights, g.weights)
    assert 0.1 <= child.threshold <= 0.9


def test_tournament_and_parents():
    pop = [genome(i, fitness=float(i)) for i in range(6)]
    rng = random.Random(4)
    assert tournament(pop, rng, k=10).fitness == 5.0
    a, b = pick_parents(pop, rng, k=6)
    assert a is not b


def test_genome_matches_network_size():
    cfg = PilotConfig(hidden1=4, hidden2=3)
    g = Genome.random(cfg, 0.5)
    assert g.weights.numel() == (3 * 4 + 4) + (4 * 3 + 3) + (3 + 1)
    assert g.to_model(cfg)(torch.zeros(3)).shape == (1,)


def test_episode_without_flapping():
    assert play_episode(lambda state: False, seed=0, max_ticks=1000) == (0.0, 25)


def test_episode_capped_by_max_ticks():
    hover = lambda state: state.bird.velocity_y >= 8
    score, ticks = play_episode(hover, seed=0, max_ticks=40)
    assert ticks == 40


def test_evolve_writes_a_loadable_autopilot(tmp_path):
    conf = EvolveConf(pop_size=4, elites=2, generations=2, max_ticks=60, artifacts=str(tmp_path))
    cfg = PilotConfig(hidden1=4, hidden2=4)
    best = evolve(conf, cfg)
    assert best.fitness > 0
    for name in ("pilot.pt", "pilot.json", "run_info.json"):
        assert os.path.isfile(tmp_path / name)
    pilot = load_autopilot(str(tmp_path / "pilot.json"))
    assert pilot.threshold == pytest.approx(best.threshold)


@pytest.mark.parametrize("gens,pop", [(0, 4), (2, 0)])
def test_evolve_needs_a_generation_and_a_genome(tmp_path, gens, pop):
    conf = EvolveConf(pop_size=pop, generations=gens, artifacts=str(tmp_path))
    with pytest.raises(ValueError):
        evolve(conf, PilotConfig())
    assert not os.path.exists(tmp_path / "run_info.json")


def test_cli_rejects_zero_generations(monkeypatch):
    monkeypatch.setattr("sys.argv", ["flappy-evolve", "--gens", "0"])
    with pytest.raises(SystemExit):
        main()
