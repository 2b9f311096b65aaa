import os, json, pdb, tempfile
from pathlib import Path
import unittest as test
from unittest import mock

import yaml

from zenodeposit import config
from zenodeposit.exceptions import ConfigurationError

datadir = Path(__file__).parents[0] / "data"
tmpdir = tempfile.TemporaryDirectory(prefix="_test_config.")

def tearDownModule():
    tmpdir.cleanup()

class TestLoadFromFile(test.TestCase):

    def test_load_yaml(self):
        cfg = config.load_from_file(str(datadir / "config.yml"))
        self.assertEqual(cfg['access_token'], "tok-0123456789")
        self.assertIs(cfg['sandbox'], True)
        self.assertEqual(cfg['metadata']['organization'], "GeoEcoMar")

    def test_load_json(self):
        cfgfile = os.path.join(tmpdir.name, "config.json")
        with open(cfgfile, 'w') as fd:
            json.dump({"sandbox": False, "timeout": 10}, fd)
        cfg = config.load_from_file(cfgfile)
        self.assertEqual(cfg, {"sandbox": False, "timeout": 10})

    def test_load_empty(self):
        cfgfile = os.path.join(tmpdir.name, "empty.yml")
        with open(cfgfile, 'w') as fd:
            pass
        self.assertEqual(config.load_from_file(cfgfile), {})

    def test_load_bad(self):
        cfgfile = os.path.join(tmpdir.name, "list.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("- sandbox\n- timeout\n")
        with self.assertRaises(ConfigurationError):
            config.load_from_file(cfgfile)

        cfgfile = os.path.join(tmpdir.name, "bad.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("sandbox: [true\n")
        with self.assertRaises(yaml.YAMLError):
            config.load_from_file(cfgfile)

        with self.assertRaises(IOError):
            config.load_from_file(os.path.join(tmpdir.name, "goober.yml"))

class TestMergeConfig(test.TestCase):

    def test_merge(self):
        defc = {"sandbox": False, "timeout": 30, "metadata": {"license": "cc-by-4.0", "visibility": "open"}}
        prim = {"sandbox": True, "metadata": {"visibility": "closed"}, "access_token": "tok"}
        out = config.merge_config(prim, defc)
        self.assertEqual(out, {"sandbox": True, "timeout": 30, "access_token": "tok",
                               "metadata": {"license": "cc-by-4.0", "visibility": "closed"}})

        # inputs are not changed
        self.assertEqual(defc['metadata'], {"license": "cc-by-4.0", "visibility": "open"})
        self.assertNotIn("access_token", defc)

class TestGetAccessToken(test.TestCase):

    def test_from_config(self):
        with mock.patch.dict(os.environ, {config.TOKEN_ENV_VAR: "envtok"}):
            self.assertEqual(config.get_access_token({"access_token": "cfgtok"}), "cfgtok")

    def test_from_env(self):
        with mock.patch.dict(os.environ, {config.TOKEN_ENV_VAR: "envtok"}):
            self.assertEqual(config.get_access_token({}), "envtok")

    def test_unset(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertIsNone(config.get_access_token({}))
            self.assertIsNone(config.get_access_token({"access_token": ""}))


if __name__ == '__main__':
    test.main()
