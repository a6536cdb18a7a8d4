import os
import tempfile
import unittest

import yaml

from minimud.config import DEFAULTS, load_config
from minimud.content import load_world
from minimud.errors import ConfigurationError, NotFoundError

CAVE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'worlds', 'cave')


def write_world(root, manifest, rooms, items):
    for name, data in (('manifest.yaml', manifest), ('rooms.yaml', rooms), ('items.yaml', items)):
        with open(os.path.join(root, name), 'w', encoding='utf-8') as f:
            f.write(data if isinstance(data, str) else yaml.safe_dump(data))


class TestLoadWorld(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def test_shipped_cave(self):
        world, manifest = load_world(CAVE)
        self.assertEqual(manifest['start_room'], 'cave_entrance')
        self.assertEqual(list(world.rooms), ['cave_entrance', 'narrow_passage', 'ancient_chamber'])
        self.assertEqual(set(world.items), {'torch', 'key_gate', 'note', 'altar'})
        self.assertEqual(world.get_item('key_gate').effects, {'unlocks': 'narrow_passage:north'})
        self.assertEqual(world.get_room('narrow_passage').flags, {'dark': True, 'locked_north': True})

    def test_start_room_defaults_to_first_room(self):
        write_world(self.tmp.name, {'title': 'Tiny'}, {'attic': {'name': 'Attic'}}, {})
        _, manifest = load_world(self.tmp.name)
        self.assertEqual(manifest['start_room'], 'attic')

    def test_unknown_start_room(self):
        write_world(self.tmp.name, {'start_room': 'cellar'}, {'attic': {}}, {})
        with self.assertRaises(ConfigurationError):
            load_world(self.tmp.name)

    def test_missing_file(self):
        with self.assertRaises(NotFoundError):
            load_world(self.tmp.name)

    def test_yaml_syntax_error(self):
        write_world(self.tmp.name, {}, "attic: [unclosed", {})
        with self.assertRaises(ConfigurationError):
            load_world(self.tmp.name)

    def test_inconsistent_content(self):
        write_world(self.tmp.name, {}, {'attic': {'exits': {'down': 'cellar'}}}, {})
        with self.assertRaises(ConfigurationError):
            load_world(self.tmp.name)

    def test_non_mapping_file(self):
        write_world(self.tmp.name, {}, "- attic\n- cellar\n", {})
        with self.assertRaises(ConfigurationError):
            load_world(self.tmp.name)


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'config.yaml')

    def tearDown(self):
        self.tmp.cleanup()

    def test_creates_default_config(self):
        config = load_config(self.path)
        self.assertTrue(os.path.exists(self.path))
        self.assertEqual(config, DEFAULTS)

    def test_partial_config_falls_back_to_defaults(self):
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write("save_file: slot1.json\ndebug_mode: true\n")
        config = load_config(self.path)
        self.assertEqual(config['save_file'], 'slot1.json')
        self.assertTrue(config['debug_mode'])
        self.assertEqual(config['world'], DEFAULTS['world'])

    def test_invalid_config(self):
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write("- just\n- a list\n")
        with self.assertRaises(ConfigurationError):
            load_config(self.path)


if __name__ == '__main__':
    unittest.main()
