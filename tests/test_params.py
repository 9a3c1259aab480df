import unittest

from jet_duct.params import PhysicsParameters, OPTION_FIELDS


class TestPhysicsParameters(unittest.TestCase):
    def test_defaults(self):
        p = PhysicsParameters()
        self.assertEqual(p.inlet_velocity, 2.0)
        self.assertEqual(p.fluid_density, 1.225)
        self.assertEqual(p.atmospheric_pressure, 101325.0)
        self.assertEqual(p.specific_heat_ratio, 1.4)
        self.assertEqual(p.combustion_temperature_ratio, 3.0)
        self.assertEqual(p.combustion_energy_factor, 1.1)

    def test_set_scales_atmospheric_pressure(self):
        p = PhysicsParameters().set({"atmosphericPressure": 50})
        self.assertEqual(p.atmospheric_pressure, 50000.0)

    def test_set_all_options(self):
        options = {
            "inletVelocity": 3,
            "fluidDensity": 1.0,
            "atmosphericPressure": 100,
            "specificHeatRatio": 1.3,
            "combustionTempRatio": 2.5,
            "combustionEnergy": 1.5,
        }
        p = PhysicsParameters.from_options(options)
        self.assertEqual(p.inlet_velocity, 3.0)
        self.assertEqual(p.fluid_density, 1.0)
        self.assertEqual(p.atmospheric_pressure, 100000.0)
        self.assertEqual(p.specific_heat_ratio, 1.3)
        self.assertEqual(p.combustion_temperature_ratio, 2.5)
        self.assertEqual(p.combustion_energy_factor, 1.5)
        self.assertEqual(p.to_options(), {k: float(v) for k, v in options.items()})

    def test_set_returns_new_snapshot(self):
        base = PhysicsParameters()
        updated = base.set({"inletVelocity": 5})
        self.assertEqual(base.inlet_velocity, 2.0)
        self.assertEqual(updated.inlet_velocity, 5.0)
        self.assertEqual(updated.fluid_density, base.fluid_density)

    def test_snapshot_is_frozen(self):
        with self.assertRaises(AttributeError):
            PhysicsParameters().inlet_velocity = 9

    def test_rejects_unknown_option(self):
        with self.assertRaises(ValueError):
            PhysicsParameters().set({"inlet_velocity": 3})

    def test_rejects_non_positive(self):
        for key in OPTION_FIELDS:
            for bad in (0, -1, float("nan"), float("inf")):
                with self.assertRaises(ValueError, msg=f"{key}={bad}"):
                    PhysicsParameters().set({key: bad})

    def test_rejects_non_numeric(self):
        with self.assertRaises(ValueError):
            PhysicsParameters().set({"fluidDensity": "dense"})
        with self.assertRaises(ValueError):
            PhysicsParameters().set({"fluidDensity": None})

    def test_rejects_bool(self):
        with self.assertRaises(ValueError):
            PhysicsParameters(inlet_velocity=True)
        with self.assertRaises(ValueError):
            PhysicsParameters().set({"fluidDensity": True})

    def test_rejects_bad_direct_construction(self):
        with self.assertRaises(ValueError):
            PhysicsParameters(fluid_density=0.0)


if __name__ == '__main__':
    unittest.main()
