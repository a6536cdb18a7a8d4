import unittest

from minimud.errors import ConfigurationError
from minimud.world import Item, Player, Room, World, lock_flag

WORLD_DATA = {
    'rooms': {
        'hall': {'name': 'Hall', 'exits': {'East': 'study'}, 'items': ['lamp', 'desk']},
        'study': {'name': 'Study', 'exits': {'west': 'hall'}, 'flags': {'dark': True, 'locked_west': True}},
    },
    'items': {
        'lamp': {'name': 'brass lamp', 'effects': {'lights': 'true'}},
        'desk': {'name': 'oak desk', 'portable': False},
    },
}


class TestWorld(unittest.TestCase):
    def test_from_data_builds_tables_in_order(self):
        world = World.from_data(WORLD_DATA)
        self.assertEqual(list(world.rooms), ['hall', 'study'])
        self.assertEqual(list(world.items), ['lamp', 'desk'])
        self.assertEqual(world.get_room('hall').exits, {'east': 'study'})
        self.assertFalse(world.get_item('desk').portable)
        self.assertTrue(world.get_item('lamp').portable)

    def test_flags_and_locks(self):
        study = World.from_data(WORLD_DATA).get_room('study')
        self.assertTrue(study.has_flag('dark'))
        self.assertTrue(study.is_locked('west'))
        self.assertFalse(study.is_locked('north'))
        study.set_flag(lock_flag('west'), False)
        self.assertFalse(study.is_locked('west'))

    def test_find_item_matches_key_or_name_ignoring_case(self):
        world = World.from_data(WORLD_DATA)
        keys = world.get_room('hall').items
        self.assertEqual(world.find_item('LAMP', keys).key, 'lamp')
        self.assertEqual(world.find_item('Brass Lamp', keys).key, 'lamp')
        self.assertIsNone(world.find_item('lamp', []))
        self.assertIsNone(world.find_item('chair', keys))

    def test_unknown_exit_destination_is_rejected(self):
        data = {'rooms': {'a': {'exits': {'north': 'nowhere'}}}, 'items': {}}
        with self.assertRaises(ConfigurationError):
            World.from_data(data)

    def test_unknown_item_in_room_is_rejected(self):
        data = {'rooms': {'a': {'items': ['ghost']}}, 'items': {}}
        with self.assertRaises(ConfigurationError):
            World.from_data(data)

    def test_item_in_two_rooms_is_rejected(self):
        data = {
            'rooms': {'a': {'items': ['coin'], 'exits': {'n': 'b'}}, 'b': {'items': ['coin']}},
            'items': {'coin': {'name': 'coin'}},
        }
        with self.assertRaises(ConfigurationError):
            World.from_data(data)

    def test_unplaced_item_is_rejected(self):
        data = {'rooms': {'a': {}}, 'items': {'coin': {'name': 'coin'}}}
        with self.assertRaises(ConfigurationError):
            World.from_data(data)

    def test_item_in_room_and_inventory_is_rejected(self):
        world = World.from_data(WORLD_DATA)
        with self.assertRaises(ConfigurationError):
            world.validate(inventory=['lamp'])

    def test_room_state_copies(self):
        room = Room('r', {'items': ['a'], 'flags': {'dark': True}})
        state = room.to_state()
        state['items'].append('b')
        state['flags']['dark'] = False
        self.assertEqual(room.items, ['a'])
        self.assertTrue(room.flags['dark'])

    def test_effect_values_are_strings(self):
        item = Item('torch', {'effects': {'lights': True}})
        self.assertEqual(item.effects, {'lights': 'True'})
        self.assertTrue(item.has_effect('lights'))
        self.assertFalse(item.has_effect('unlocks'))

    def test_directions_are_lowercased(self):
        self.assertEqual(Item('k', {'effects': {'unlocks': 'Hall:North'}}).effects['unlocks'], 'Hall:north')
        self.assertEqual(Item('k', {'effects': {'unlocks': 'a:b:C'}}).effects['unlocks'], 'a:b:C')
        room = Room('r', {'flags': {'locked_West': True, 'Dark': True}})
        self.assertEqual(room.flags, {'locked_west': True, 'Dark': True})
        self.assertTrue(room.is_locked('WEST'))

    def test_player_state(self):
        p = Player('Hero', 'hall', ['lamp'])
        self.assertTrue(p.carries('lamp'))
        self.assertEqual(Player.from_state(p.to_state()), p)
        self.assertEqual(World.from_data(WORLD_DATA).container_of('lamp', p), ['hall', 'inventory'])


if __name__ == '__main__':
    unittest.main()
