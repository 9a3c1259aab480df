import unittest
import numpy as np

from jet_duct.noise import QuietNoise
from jet_duct.params import PhysicsParameters
from jet_duct.particle import FLAME_SIZE
from jet_duct.simulation import Simulation, SimulationConfig


class TestSimulation(unittest.TestCase):
    def setUp(self):
        self.sim = Simulation(SimulationConfig(particle_count=40, seed=5))

    def test_population_inside_duct(self):
        self.assertEqual(len(self.sim.particles), 40)
        for p in self.sim.particles:
            self.assertTrue(self.sim.duct.is_inside(p.x, p.y))
            self.assertFalse(p.has_combusted)

    def test_step_advances_clock(self):
        self.sim.step(10.0)
        self.sim.step()
        self.assertEqual(self.sim.tick, 2)
        self.assertAlmostEqual(self.sim.time_ms, 10.0 + 1000.0 / 60.0)

    def test_arena_keeps_identity(self):
        before = [id(p) for p in self.sim.particles]
        self.sim.run(400)
        self.assertEqual([id(p) for p in self.sim.particles], before)

    def test_particles_stay_in_duct_lengthwise(self):
        self.sim.run(300)
        for p in self.sim.particles:
            self.assertGreaterEqual(p.x, 0.0)
            self.assertLessEqual(p.x, self.sim.duct.width)

    def test_params_commit_at_tick_boundary(self):
        staged = self.sim.set_params({"inletVelocity": 6})
        self.assertEqual(self.sim.params.inlet_velocity, 2.0)
        self.assertEqual(staged.inlet_velocity, 6.0)
        self.sim.step()
        self.assertIs(self.sim.params, staged)

    def test_staged_params_accumulate(self):
        self.sim.set_params({"inletVelocity": 6})
        self.sim.set_params({"fluidDensity": 2.0})
        self.sim.step()
        self.assertEqual(self.sim.params.inlet_velocity, 6.0)
        self.assertEqual(self.sim.params.fluid_density, 2.0)

    def test_rejected_params_leave_state_alone(self):
        with self.assertRaises(ValueError):
            self.sim.set_params({"fluidDensity": 0})
        self.sim.step()
        self.assertEqual(self.sim.params, PhysicsParameters())

    def test_step_rejects_bad_tick_length(self):
        p = self.sim.add_particle(400.0, 100.0)
        self.sim.step(100.0)
        for bad in (0.0, -500.0, float("nan"), float("inf")):
            with self.assertRaises(ValueError):
                self.sim.step(bad)
        self.assertEqual(self.sim.tick, 1)
        self.assertEqual(self.sim.time_ms, 100.0)
        self.assertLessEqual(p.flame_size, FLAME_SIZE)

    def test_rejected_tick_leaves_staged_params(self):
        self.sim.set_params({"inletVelocity": 6})
        with self.assertRaises(ValueError):
            self.sim.step(-1.0)
        self.assertEqual(self.sim.params.inlet_velocity, 2.0)
        self.sim.step()
        self.assertEqual(self.sim.params.inlet_velocity, 6.0)

    def test_config_rejects_bad_tick_length(self):
        for bad in (0.0, -16.0, float("nan")):
            with self.assertRaises(ValueError):
                Simulation(SimulationConfig(particle_count=1, dt_ms=bad))

    def test_flame_never_grows_over_run(self):
        p = self.sim.add_particle(400.0, 100.0)
        sizes = []
        for _ in range(80):
            self.sim.step()
            if p.has_combusted:
                sizes.append(p.flame_size)
        self.assertTrue(sizes)
        self.assertLessEqual(max(sizes), FLAME_SIZE)

    def test_run_rejects_negative_ticks(self):
        with self.assertRaises(ValueError):
            self.sim.run(-1)
        with self.assertRaises(ValueError):
            self.sim.run(5, dt_ms=-1.0)
        self.assertEqual(self.sim.tick, 0)

    def test_run_zero_ticks(self):
        history = self.sim.run(0)
        self.assertEqual(len(history["t"]), 0)

    def test_populate_replaces_arena(self):
        self.sim.populate(7)
        self.assertEqual(len(self.sim.particles), 7)
        for p in self.sim.particles:
            self.assertTrue(self.sim.duct.is_inside(p.x, p.y))

    def test_run_with_tick_length(self):
        history = self.sim.run(4, dt_ms=25.0)
        np.testing.assert_allclose(history["t"], [25.0, 50.0, 75.0, 100.0])
        self.assertEqual(self.sim.time_ms, 100.0)

    def test_set_particle_count(self):
        first = self.sim.particles[0]
        self.sim.set_particle_count(60)
        self.assertEqual(len(self.sim.particles), 60)
        self.sim.set_particle_count(10)
        self.assertEqual(len(self.sim.particles), 10)
        self.assertIs(self.sim.particles[0], first)
        with self.assertRaises(ValueError):
            self.sim.set_particle_count(-1)

    def test_negative_particle_count_in_config(self):
        with self.assertRaises(ValueError):
            Simulation(SimulationConfig(particle_count=-3))

    def test_resize_repopulates(self):
        self.sim.resize(400, 80)
        self.assertEqual(self.sim.duct.width, 400.0)
        self.assertEqual(len(self.sim.particles), 40)
        for p in self.sim.particles:
            self.assertLessEqual(p.x, 400.0)
            self.assertTrue(self.sim.duct.is_inside(p.x, p.y))

    def test_resize_rejects_bad_dimensions(self):
        with self.assertRaises(ValueError):
            self.sim.resize(400, 0)
        self.assertEqual(self.sim.duct.height, 200.0)

    def test_add_particle(self):
        p = self.sim.add_particle(0.0, 100.0)
        self.assertIs(self.sim.particles[-1], p)
        self.assertEqual(p.x, 0.0)

    def test_deterministic_with_seed(self):
        runs = []
        for _ in range(2):
            sim = Simulation(SimulationConfig(particle_count=30, seed=123))
            sim.set_params({"combustionTempRatio": 4.0})
            history = sim.run(500)
            runs.append((sim.state_arrays(), history))
        (a, ha), (b, hb) = runs
        np.testing.assert_array_equal(a["x"], b["x"])
        np.testing.assert_array_equal(a["y"], b["y"])
        np.testing.assert_array_equal(ha["mean_temperature"], hb["mean_temperature"])

    def test_different_seeds_differ(self):
        a = Simulation(SimulationConfig(particle_count=30, seed=1))
        b = Simulation(SimulationConfig(particle_count=30, seed=2))
        self.assertFalse(np.array_equal(a.state_arrays()["x"], b.state_arrays()["x"]))

    def test_run_history(self):
        history = self.sim.run(120)
        for key in ("t", "mean_vx", "mean_temperature", "mean_pressure",
                    "combusted_fraction", "flame_count"):
            self.assertEqual(len(history[key]), 120)
        self.assertTrue(np.all(np.diff(history["t"]) > 0))
        self.assertTrue(np.all(history["combusted_fraction"] >= 0))
        self.assertTrue(np.all(history["combusted_fraction"] <= 1))
        self.assertTrue(np.all(np.isfinite(history["mean_vx"])))
        # some particles start in or past the chamber
        self.assertGreater(history["combusted_fraction"].max(), 0)

    def test_run_empty_population(self):
        sim = Simulation(SimulationConfig(particle_count=0, seed=1))
        history = sim.run(5)
        self.assertTrue(np.all(np.isnan(history["mean_vx"])))
        self.assertTrue(np.all(history["flame_count"] == 0))

    def test_state_arrays(self):
        self.sim.step()
        state = self.sim.state_arrays()
        self.assertEqual(state["colors"].shape, (40, 3))
        self.assertTrue(np.all(state["colors"] >= 0))
        self.assertTrue(np.all(state["colors"] <= 1))
        self.assertEqual(len(state["flame_size"]), 40)

    def test_injected_noise(self):
        sim = Simulation(SimulationConfig(particle_count=3), noise=QuietNoise())
        for p in sim.particles:
            self.assertEqual((p.x, p.y, p.vx, p.vy), (500.0, 100.0, 2.0, 0.0))


if __name__ == '__main__':
    unittest.main()
