import copy
import os
import pickle
import subprocess
import sys
import unittest
import uuid

from intern_eq.base import Handle, InternTable, get_table, intern_table, InvalidHandleError, StaleHandleError
from str_gen import OZ_CHARACTERS


class TestHandle(unittest.TestCase):
    def setUp(self):
        self.table = InternTable()

    def test_zero_handle(self):
        zero = Handle()

        self.assertFalse(zero)
        self.assertEqual(int(zero), 0)
        self.assertEqual(zero, Handle())
        self.assertIsNone(zero.table)
        self.assertTrue(self.table.assign('x'))

    def test_equality_only(self):
        h1, h2 = self.table.assign_batch(['coyote', 'roadrunner'])

        self.assertTrue(h1 == self.table.assign('coyote'))
        self.assertTrue(h1 != h2)
        self.assertFalse(h1 == 1)
        self.assertNotEqual(h1, 'coyote')

        for op in (lambda a, b: a < b, lambda a, b: a <= b, lambda a, b: a > b, lambda a, b: a >= b):
            with self.assertRaises(TypeError):
                op(h1, h2)

        with self.assertRaises(TypeError):
            sorted([h1, h2])

    def test_hashable(self):
        handles = self.table.assign_batch(OZ_CHARACTERS)
        self.assertEqual(len(set(handles)), len(set(OZ_CHARACTERS)))
        self.assertEqual(hash(handles[1]), hash(self.table.assign(OZ_CHARACTERS[1])))

    def test_properties(self):
        h = self.table.assign('tag')

        self.assertEqual(h.value, 1)
        self.assertEqual(int(h), 1)
        self.assertEqual(h.epoch, self.table.epoch)
        self.assertIs(h.table, self.table)
        self.assertEqual(str(h), 'tag')

    def test_repr_never_raises(self):
        h = self.table.assign('tag')
        self.table.reset()

        self.assertIn('value=1', repr(h))
        self.assertIn('value=0', repr(Handle()))
        with self.assertRaises(StaleHandleError):
            str(h)

    def test_invalid_value(self):
        with self.assertRaises(ValueError):
            Handle(-1)
        with self.assertRaises(ValueError):
            Handle(1.0)

    def test_copy_returns_self(self):
        h = self.table.assign('tag')
        self.assertIs(copy.copy(h), h)
        self.assertIs(copy.deepcopy(h), h)
        self.assertIs(copy.deepcopy([h])[0], h)

    def test_immutable(self):
        h = self.table.assign('tag')
        with self.assertRaises(AttributeError):
            h.value = 2
        with self.assertRaises(AttributeError):
            h.extra = 2


class TestHandlePickle(unittest.TestCase):
    def test_pickle(self):
        for forget in (False, True):
            with self.subTest(forget=forget):
                table = get_table('test_handle_pickle')
                table.reset()
                handles = table.assign_batch(OZ_CHARACTERS)
                data = pickle.dumps(handles)

                if forget:
                    table.reset()

                loaded = pickle.loads(data)

                self.assertEqual(len(loaded), len(OZ_CHARACTERS))
                self.assertEqual([str(h) for h in loaded], OZ_CHARACTERS)
                self.assertEqual(loaded[1], loaded[15])
                self.assertIs(loaded[0].table, table)

    def test_pickle_anonymous_table(self):
        h = InternTable().assign('nameless')
        with self.assertRaises(pickle.PicklingError):
            pickle.dumps(h)

    def test_unpickle_creates_table(self):
        name = f'test_handle_unseen_{uuid.uuid4().hex}'
        source = InternTable(name=name)
        data = pickle.dumps(source.assign_batch(['x', 'y', 'x']))

        # forget the table so loading meets a name the registry has never seen
        with intern_table._REGISTRY_LOCK:
            del intern_table._REGISTRY[name]

        loaded = pickle.loads(data)
        table = get_table(name)

        self.assertIsNot(table, source)
        self.assertIs(loaded[0].table, table)
        self.assertEqual([str(h) for h in loaded], ['x', 'y', 'x'])
        self.assertEqual(loaded[0], loaded[2])
        self.assertNotEqual(loaded[0], loaded[1])
        self.assertEqual(len(table), 2)

    def test_unpickle_in_another_process(self):
        name = f'test_handle_cross_process_{uuid.uuid4().hex}'
        table = InternTable(name=name)
        data = pickle.dumps(table.assign_batch(OZ_CHARACTERS))

        script = (
            'import pickle, sys\n'
            'from intern_eq.base import intern_table\n'
            f'assert {name!r} not in intern_table._REGISTRY\n'
            'handles = pickle.loads(sys.stdin.buffer.read())\n'
            f'assert handles[0].table is intern_table.get_table({name!r})\n'
            'assert handles[1] == handles[15] and handles[0] == handles[19]\n'
            'assert len(handles[0].table) == len(set(handles))\n'
            'sys.stdout.write(chr(10).join(str(h) for h in handles))\n'
        )
        root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(intern_table.__file__))))
        env = dict(os.environ, INTERN_EQ_LOG_LEVEL='WARNING', PYTHONPATH=os.pathsep.join(filter(None, [root, os.environ.get('PYTHONPATH')])))
        result = subprocess.run([sys.executable, '-c', script], input=data, capture_output=True, env=env, timeout=60)

        self.assertEqual(result.returncode, 0, result.stderr.decode())
        self.assertEqual(result.stdout.decode().split('\n'), OZ_CHARACTERS)

    def test_pickle_zero_handle(self):
        self.assertEqual(pickle.loads(pickle.dumps(Handle())), Handle())

    def test_pickle_stale_handle(self):
        table = get_table('test_handle_pickle_stale')
        h = table.assign('gone')
        table.reset()

        with self.assertRaises(InvalidHandleError):
            pickle.dumps(h)

    def test_duplicate_table_name(self):
        table = get_table('test_handle_duplicate')
        self.assertIs(get_table('test_handle_duplicate'), table)
        with self.assertRaises(ValueError):
            InternTable(name='test_handle_duplicate')


if __name__ == '__main__':
    unittest.main()
