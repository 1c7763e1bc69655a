import tempfile
from pathlib import Path
import unittest
import numpy as np

from covprior.utils.Tee import Tee
from covprior.utils.control import Control
from covprior.utils.exceptions import InvalidParameter
from covprior.bayesian_models.inverse_wishart import InverseWishart


class Test_Control(unittest.TestCase):

    cfg_file = Path(__file__).parent / '..' / '..' / 'configs_covprior.yaml'

    def tearDown(self) -> None:
        Control.update(check_distribution_parameters=True)

    def test_default(self):
        self.assertTrue( Control.check_distribution_parameters )
        self.assertTrue( Control.resolve() )
        self.assertFalse( Control.resolve(False) )

    def test_override(self):
        with Control.override(check_distribution_parameters=False):
            self.assertFalse( Control.resolve() )
            self.assertTrue( Control.resolve(True) )
            InverseWishart(-1., np.eye(2))
        self.assertTrue( Control.resolve() )
        with self.assertRaises(InvalidParameter):
            InverseWishart(-1., np.eye(2))

    def test_override_restores_on_error(self):
        with self.assertRaises(RuntimeError):
            with Control.override(check_distribution_parameters=False):
                raise RuntimeError()
        self.assertTrue( Control.check_distribution_parameters )

    def test_unknown_setting(self):
        with self.assertRaises(KeyError):
            Control.update(check_everything=False)

    def test_load(self):
        with tempfile.TemporaryDirectory() as folder:
            cfg_file = Path(folder) / 'cfg.yaml'
            cfg_file.write_text('check_distribution_parameters: false\n')
            cfg = Control.load(cfg_file)
        self.assertEqual(cfg, {'check_distribution_parameters': False})
        self.assertFalse( Control.check_distribution_parameters )
        InverseWishart(5., np.diag([1., -1.]))

    def test_load_repository_config(self):
        if not self.cfg_file.exists():
            self.skipTest(f'{self.cfg_file} not found')
        Control.load(self.cfg_file)
        self.assertTrue( Control.check_distribution_parameters )


if __name__ == "__main__":
    with Tee( Path(__file__).parent / 'log', Path(__file__).stem) as T:
        t = unittest.main(verbosity=2, exit=False, catchbreak=True)
